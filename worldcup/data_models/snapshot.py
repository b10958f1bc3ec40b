"""
Snapshot data models for the live team view.

Provides immutable snapshots of a sectioned, sorted query result and the
edit operations that transform one snapshot into another.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, Mapping, Optional, Tuple, Union


@dataclass(frozen=True)
class SectionSnapshot:
    """Ordered team ids sharing one section key value."""
    key: str
    row_ids: Tuple[int, ...] = ()

    def __len__(self) -> int:
        return len(self.row_ids)


@dataclass(frozen=True)
class SectionInfo:
    """Section summary exposed to the presentation layer."""
    label: str
    count: int


@dataclass(frozen=True)
class Snapshot:
    """Materialized sectioned view of a query result at one point in time.

    Equality covers the section structure only. ``fingerprints`` maps team id
    to the field values seen when the snapshot was built and is used to
    detect in-place updates.
    """
    sections: Tuple[SectionSnapshot, ...] = ()
    fingerprints: Mapping[int, Tuple] = field(default_factory=dict, compare=False, repr=False)
    generation: int = field(default=0, compare=False)

    @property
    def section_keys(self) -> Tuple[str, ...]:
        return tuple(section.key for section in self.sections)

    def __len__(self) -> int:
        return sum(len(section) for section in self.sections)

    def iter_ids(self) -> Iterator[int]:
        for section in self.sections:
            yield from section.row_ids

    def locations(self) -> Dict[int, Tuple[int, int]]:
        """Map every team id to its (section, row) position."""
        return {
            team_id: (section_index, row_index)
            for section_index, section in enumerate(self.sections)
            for row_index, team_id in enumerate(section.row_ids)
        }

    def index_of(self, team_id: int) -> Optional[Tuple[int, int]]:
        return self.locations().get(team_id)


@dataclass(frozen=True)
class SectionInsert:
    index: int
    key: str


@dataclass(frozen=True)
class SectionDelete:
    index: int
    key: str


@dataclass(frozen=True)
class RowInsert:
    section: int
    row: int
    team_id: int


@dataclass(frozen=True)
class RowDelete:
    section: int
    row: int
    team_id: int


@dataclass(frozen=True)
class RowMove:
    from_section: int
    from_row: int
    to_section: int
    to_row: int
    team_id: int


@dataclass(frozen=True)
class RowUpdate:
    section: int
    row: int
    team_id: int


Operation = Union[SectionInsert, SectionDelete, RowInsert, RowDelete, RowMove, RowUpdate]
