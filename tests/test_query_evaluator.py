"""Tests for query specification validation and evaluation."""

import random

import pytest

from worldcup.constants import TeamFields
from worldcup.data_models.query import QuerySpec, SortKey, teams_by_zone
from worldcup.database.models import Team
from worldcup.services.query_evaluator import evaluate, group_sections, validate_spec
from worldcup.utils.exceptions import InvalidSpecError


class TestValidateSpec:

    def test_default_spec_is_valid(self):
        validate_spec(teams_by_zone())

    def test_sort_fields_in_priority_order(self):
        assert teams_by_zone().sort_fields == (
            TeamFields.QUALIFYING_ZONE, TeamFields.WINS, TeamFields.TEAM_NAME
        )

    def test_duplicate_field_is_named(self):
        spec = QuerySpec(sort_keys=(SortKey(TeamFields.WINS), SortKey(TeamFields.TEAM_NAME), SortKey(TeamFields.WINS)))
        with pytest.raises(InvalidSpecError, match="duplicate sort field .wins."):
            validate_spec(spec)

    def test_unsectioned_spec_is_valid(self):
        validate_spec(QuerySpec(sort_keys=(SortKey(TeamFields.WINS, ascending=False),)))

    @pytest.mark.parametrize("spec", [
        QuerySpec(sort_keys=()),
        QuerySpec(sort_keys=(SortKey("population"),)),
        QuerySpec(sort_keys=(SortKey(TeamFields.WINS), SortKey(TeamFields.WINS, ascending=False))),
        QuerySpec(
            sort_keys=(SortKey(TeamFields.WINS, ascending=False), SortKey(TeamFields.QUALIFYING_ZONE)),
            section_key=TeamFields.QUALIFYING_ZONE,
        ),
    ])
    def test_invalid_specs(self, spec):
        with pytest.raises(InvalidSpecError):
            validate_spec(spec)

    @pytest.mark.asyncio
    async def test_evaluate_rejects_section_key_outside_sort_prefix(self, team_ops):
        spec = QuerySpec(sort_keys=(SortKey(TeamFields.TEAM_NAME),), section_key=TeamFields.QUALIFYING_ZONE)
        with pytest.raises(InvalidSpecError):
            await evaluate(spec, team_ops)


class TestEvaluate:

    @pytest.mark.asyncio
    async def test_sections_ascending_rows_by_wins_descending(self, team_ops, make_team):
        await team_ops.insert_many([
            make_team("Netherlands", "Europe", wins=9),
            make_team("Japan", "Asia", wins=2),
            make_team("Spain", "Europe", wins=11),
            make_team("Iran", "Asia", wins=4),
        ])

        records = await evaluate(teams_by_zone(), team_ops)

        assert [r.team_name for r in records] == ["Iran", "Japan", "Spain", "Netherlands"]
        sections = group_sections(records, teams_by_zone())
        assert [key for key, _ in sections] == ["Asia", "Europe"]

    @pytest.mark.asyncio
    async def test_name_breaks_wins_ties(self, team_ops, make_team):
        await team_ops.insert_many([
            make_team("Uruguay", "South America", wins=3),
            make_team("Argentina", "South America", wins=3),
        ])

        records = await evaluate(teams_by_zone(), team_ops)
        assert [r.team_name for r in records] == ["Argentina", "Uruguay"]

    @pytest.mark.asyncio
    async def test_insertion_order_breaks_full_ties(self, team_ops, make_team):
        first = await team_ops.insert(make_team("Korea", "Asia", wins=1))
        second = await team_ops.insert(make_team("Korea", "Asia", wins=1))

        records = await evaluate(teams_by_zone(), team_ops)
        assert [r.id for r in records] == [first, second]

    @pytest.mark.asyncio
    async def test_filters_are_applied(self, team_ops, make_team):
        await team_ops.insert_many([
            make_team("Ghana", "Africa", wins=1),
            make_team("Nigeria", "Africa", wins=0),
            make_team("Mexico", "North America", wins=4),
        ])

        spec = teams_by_zone().with_filters(Team.wins > 0)
        records = await evaluate(spec, team_ops)

        assert [r.team_name for r in records] == ["Ghana", "Mexico"]

    @pytest.mark.asyncio
    async def test_unsectioned_spec_groups_into_one_section(self, team_ops, make_team):
        await team_ops.insert_many([make_team("Ghana", "Africa", 1), make_team("Mexico", "North America", 4)])
        spec = QuerySpec(sort_keys=(SortKey(TeamFields.WINS, ascending=False),))

        sections = group_sections(await evaluate(spec, team_ops), spec)

        assert len(sections) == 1
        assert sections[0][0] == ""
        assert [r.team_name for r in sections[0][1]] == ["Mexico", "Ghana"]

    @pytest.mark.asyncio
    async def test_sections_stay_contiguous_under_random_mutations(self, team_ops, make_team):
        rng = random.Random(2014)
        zones = ["Africa", "Asia", "Europe", "North America", "South America"]
        spec = teams_by_zone()
        ids = []

        for step in range(40):
            if not ids or rng.random() < 0.5:
                ids.append(await team_ops.insert(
                    make_team(f"Team {step}", rng.choice(zones), wins=rng.randint(0, 5))
                ))
            else:
                zone = rng.choice(zones)

                def mutate(row, zone=zone):
                    row.wins = row.wins + 1
                    row.qualifying_zone = zone

                await team_ops.update(rng.choice(ids), mutate)

            records = await evaluate(spec, team_ops)
            keys = [key for key, _ in group_sections(records, spec)]
            assert len(keys) == len(set(keys))
            assert keys == sorted(keys)
            for _, group in group_sections(records, spec):
                ordering = [(-r.wins, r.team_name, r.id) for r in group]
                assert ordering == sorted(ordering)
