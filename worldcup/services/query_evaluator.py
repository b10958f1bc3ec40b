"""
Query specification evaluation.

Turns a QuerySpec into an ordered list of teams and groups that list into
sections. Ordering is done by the database; ties after the last sort key are
broken by id, which is insertion order.
"""

from itertools import groupby
from typing import List, Tuple

from sqlalchemy import select

from worldcup.constants import TeamFields
from worldcup.data_models.query import QuerySpec
from worldcup.data_models.team import TeamRecord
from worldcup.database.models import Team
from worldcup.utils.exceptions import InvalidSpecError


def validate_spec(spec: QuerySpec) -> None:
    """
    Check that a spec can be evaluated and sectioned coherently.

    Raises:
        InvalidSpecError: On empty, unknown or duplicate sort fields, or a
            section key that is not the primary sort key
    """
    if not spec.sort_keys:
        raise InvalidSpecError("at least one sort key is required")

    fields = spec.sort_fields
    for name in fields:
        if name not in TeamFields.SORTABLE:
            raise InvalidSpecError(f"unknown sort field '{name}'")
    duplicates = sorted({name for name in fields if fields.count(name) > 1})
    if duplicates:
        raise InvalidSpecError(f"duplicate sort field '{duplicates[0]}'")

    if spec.section_key is not None and spec.section_key != fields[0]:
        raise InvalidSpecError(
            f"section key '{spec.section_key}' must be the primary sort key "
            f"(got '{fields[0]}')"
        )


def build_statement(spec: QuerySpec):
    """Build the ordered select(Team) statement for a validated spec"""
    statement = select(Team)
    if spec.filters:
        statement = statement.where(*spec.filters)

    order_by = []
    for key in spec.sort_keys:
        column = getattr(Team, key.field)
        order_by.append(column.asc() if key.ascending else column.desc())
    order_by.append(Team.id.asc())
    return statement.order_by(*order_by)


async def evaluate(spec: QuerySpec, team_ops) -> List[TeamRecord]:
    """Evaluate spec against the team store and return the ordered teams"""
    validate_spec(spec)
    return await team_ops.fetch(build_statement(spec))


def section_value(record: TeamRecord, spec: QuerySpec) -> str:
    if spec.section_key is None:
        return ""
    value = getattr(record, spec.section_key)
    return "" if value is None else str(value)


def group_sections(records: List[TeamRecord], spec: QuerySpec) -> List[Tuple[str, List[TeamRecord]]]:
    """Split ordered records into contiguous runs sharing a section key value"""
    return [
        (key, list(group))
        for key, group in groupby(records, key=lambda record: section_value(record, spec))
    ]
