"""
Team data models.

Provides the immutable value handed out by the team store in place of live
ORM rows.
"""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class TeamRecord:
    """Detached copy of a stored team."""
    team_name: str
    qualifying_zone: str
    wins: int = 0
    image_name: Optional[str] = None
    id: Optional[int] = None

    @classmethod
    def from_row(cls, row) -> "TeamRecord":
        return cls(
            team_name=row.team_name,
            qualifying_zone=row.qualifying_zone,
            wins=row.wins,
            image_name=row.image_name,
            id=row.id,
        )

    def fingerprint(self) -> Tuple:
        """Field values compared to detect in-place updates."""
        return (self.team_name, self.qualifying_zone, self.wins, self.image_name)
