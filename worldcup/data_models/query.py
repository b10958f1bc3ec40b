"""
Query specification data models.

A QuerySpec describes which teams a live view shows, in what order, and how
they are grouped into sections.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Tuple

from worldcup.constants import TeamFields


@dataclass(frozen=True)
class SortKey:
    """One level of the sort order."""
    field: str
    ascending: bool = True


@dataclass(frozen=True)
class QuerySpec:
    """Sort order, optional section key and optional filter criteria.

    ``filters`` holds SQLAlchemy boolean expressions over ``Team`` columns.
    They are excluded from equality since SQLAlchemy overloads ``==``.
    """
    sort_keys: Tuple[SortKey, ...]
    section_key: Optional[str] = None
    filters: Tuple[Any, ...] = field(default=(), compare=False)

    @property
    def sort_fields(self) -> Tuple[str, ...]:
        return tuple(key.field for key in self.sort_keys)

    def with_filters(self, *criteria) -> "QuerySpec":
        return QuerySpec(
            sort_keys=self.sort_keys,
            section_key=self.section_key,
            filters=self.filters + tuple(criteria),
        )


def teams_by_zone() -> QuerySpec:
    """Zone ascending, wins descending, name ascending, sectioned by zone."""
    return QuerySpec(
        sort_keys=(
            SortKey(TeamFields.QUALIFYING_ZONE, ascending=True),
            SortKey(TeamFields.WINS, ascending=False),
            SortKey(TeamFields.TEAM_NAME, ascending=True),
        ),
        section_key=TeamFields.QUALIFYING_ZONE,
    )
