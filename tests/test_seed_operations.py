"""Tests for seed file import."""

import json

import pytest

from worldcup.config import Config
from worldcup.operations.seed_operations import (
    SeedOperations, load_seed_file, parse_seed_entry
)
from worldcup.utils.exceptions import SeedImportError


def write_seed(tmp_path, entries, name="teams.json"):
    path = tmp_path / name
    path.write_text(json.dumps(entries), encoding="utf-8")
    return path


def entry(name, zone, wins=0, image="flag"):
    return {"teamName": name, "qualifyingZone": zone, "imageName": image, "wins": wins}


class TestParseSeedEntry:

    def test_valid_entry(self):
        record = parse_seed_entry(entry("Brazil", "South America", 5, "br"))

        assert record.team_name == "Brazil"
        assert record.qualifying_zone == "South America"
        assert record.wins == 5
        assert record.image_name == "br"
        assert record.id is None

    def test_integral_float_wins_are_accepted(self):
        assert parse_seed_entry(entry("Chile", "South America", 2.0)).wins == 2

    @pytest.mark.parametrize("bad", [
        "Brazil",
        {"teamName": "Brazil", "qualifyingZone": "South America", "wins": 1},
        {"teamName": 7, "qualifyingZone": "South America", "imageName": "br", "wins": 1},
        entry("Brazil", "South America", wins="5"),
        entry("Brazil", "South America", wins=True),
        entry("Brazil", "South America", wins=1.5),
        entry("Brazil", "South America", wins=-3),
    ])
    def test_malformed_entries(self, bad):
        with pytest.raises(ValueError):
            parse_seed_entry(bad)


class TestLoadSeedFile:

    def test_missing_file(self, tmp_path):
        with pytest.raises(SeedImportError) as exc_info:
            load_seed_file(tmp_path / "missing.json")
        assert "missing.json" in exc_info.value.source

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("[{", encoding="utf-8")

        with pytest.raises(SeedImportError):
            load_seed_file(path)

    def test_top_level_must_be_array(self, tmp_path):
        path = write_seed(tmp_path, {"teams": []})

        with pytest.raises(SeedImportError):
            load_seed_file(path)

    def test_bundled_seed_file_is_valid(self):
        entries = load_seed_file(Config.SEED_FILE)

        records = [parse_seed_entry(item) for item in entries]
        assert len(records) == 28
        assert all(record.wins == 0 for record in records)
        assert {record.qualifying_zone for record in records} >= {"Africa", "Asia", "Europe"}


class TestSeedOperations:

    @pytest.mark.asyncio
    async def test_imports_into_empty_store(self, team_ops, tmp_path):
        path = write_seed(tmp_path, [entry("Brazil", "South America", 5), entry("Japan", "Asia")])

        report = await SeedOperations(team_ops, seed_file=path).import_if_needed()

        assert report.imported_count == 2
        assert report.rejected == []
        assert await team_ops.count() == 2

    @pytest.mark.asyncio
    async def test_skips_when_store_has_teams(self, team_ops, make_team, tmp_path):
        await team_ops.insert(make_team("Spain", "Europe"))
        path = write_seed(tmp_path, [entry("Brazil", "South America")])

        report = await SeedOperations(team_ops, seed_file=path).import_if_needed()

        assert report is None
        assert await team_ops.count() == 1

    @pytest.mark.asyncio
    async def test_second_run_imports_nothing(self, team_ops, tmp_path):
        path = write_seed(tmp_path, [entry("Brazil", "South America")])
        seeds = SeedOperations(team_ops, seed_file=path)

        await seeds.import_if_needed()
        await seeds.import_if_needed()

        assert await team_ops.count() == 1

    @pytest.mark.asyncio
    async def test_lenient_mode_skips_malformed_entries(self, team_ops, tmp_path):
        path = write_seed(tmp_path, [
            entry("Brazil", "South America", 5),
            {"teamName": "Nowhere"},
            entry("Japan", "Asia", wins=-1),
            entry("Ghana", "Africa"),
        ])

        report = await SeedOperations(team_ops, seed_file=path, strict=False).import_all()

        assert report.imported_count == 2
        assert [index for index, _ in report.rejected] == [1, 2]
        stored = await team_ops.get_many(report.imported_ids)
        assert sorted(team.team_name for team in stored.values()) == ["Brazil", "Ghana"]

    @pytest.mark.asyncio
    async def test_strict_mode_writes_nothing(self, team_ops, tmp_path):
        path = write_seed(tmp_path, [entry("Brazil", "South America"), {"teamName": "Nowhere"}])
        calls = []
        team_ops.subscribe(lambda: calls.append(1))

        with pytest.raises(SeedImportError) as exc_info:
            await SeedOperations(team_ops, seed_file=path, strict=True).import_all()

        assert "entry 1" in str(exc_info.value)
        assert await team_ops.count() == 0
        assert calls == []

    @pytest.mark.asyncio
    async def test_import_is_one_notification(self, team_ops, tmp_path):
        path = write_seed(tmp_path, [entry(f"Team {i}", "Europe") for i in range(5)])
        calls = []
        team_ops.subscribe(lambda: calls.append(1))

        await SeedOperations(team_ops, seed_file=path).import_all()

        assert calls == [1]

    @pytest.mark.asyncio
    async def test_unreadable_file_fails_even_when_lenient(self, team_ops, tmp_path):
        seeds = SeedOperations(team_ops, seed_file=tmp_path / "missing.json", strict=False)

        with pytest.raises(SeedImportError):
            await seeds.import_if_needed()
