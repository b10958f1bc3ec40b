"""
Text table view for the team board.

Mirrors the live view by replaying its operation stream instead of reading
the controller's snapshot directly, the way a table widget applies batch
updates.
"""

from typing import List

from worldcup.constants import DisplayConstants
from worldcup.data_models.snapshot import (
    Operation, RowDelete, RowInsert, RowMove, RowUpdate,
    SectionDelete, SectionInsert, Snapshot
)
from worldcup.data_models.team import TeamRecord
from worldcup.services.reconciler import apply_operations
from worldcup.utils.logger import setup_logger

logger = setup_logger(__name__)


def describe_operation(operation: Operation) -> str:
    """One-line description of an operation (positions are 0-based)"""
    if isinstance(operation, SectionInsert):
        return f"insert section {operation.index} '{operation.key}'"
    if isinstance(operation, SectionDelete):
        return f"delete section {operation.index} '{operation.key}'"
    if isinstance(operation, RowInsert):
        return f"insert team {operation.team_id} at {operation.section}:{operation.row}"
    if isinstance(operation, RowDelete):
        return f"delete team {operation.team_id} at {operation.section}:{operation.row}"
    if isinstance(operation, RowMove):
        return (
            f"move team {operation.team_id} from {operation.from_section}:{operation.from_row} "
            f"to {operation.to_section}:{operation.to_row}"
        )
    if isinstance(operation, RowUpdate):
        return f"update team {operation.team_id} at {operation.section}:{operation.row}"
    return repr(operation)


def format_row(position: str, team: TeamRecord) -> str:
    """Format a team the way a board cell shows it"""
    image = f"[{team.image_name}]" if team.image_name else "[ ]"
    name = team.team_name.ljust(DisplayConstants.NAME_COLUMN_WIDTH)
    return f"  {position:>5} {image} {name} {DisplayConstants.WINS_LABEL}: {team.wins}"


class TeamTableView:
    """Text rendering of a live view kept current through its operations."""

    def __init__(self, controller):
        self.controller = controller
        self.displayed: Snapshot = controller.snapshot
        self.change_log: List[str] = []
        self._handle = controller.add_observer(self.apply_changes)

    def apply_changes(self, operations: List[Operation], snapshot: Snapshot):
        """Replay operations on the displayed rows"""
        self.displayed = apply_operations(self.displayed, operations)
        self.change_log.extend(describe_operation(operation) for operation in operations)

        if self.displayed != snapshot:
            logger.warning("Displayed rows diverged from the live view, reloading")
            self.displayed = snapshot

    async def render(self) -> str:
        """Render the displayed sections with current team values"""
        teams = await self.controller.team_ops.get_many(self.displayed.iter_ids())

        lines = [DisplayConstants.TITLE]
        if not self.displayed.sections:
            lines.append("  (no teams)")
        for section_number, section in enumerate(self.displayed.sections, start=1):
            label = section.key or DisplayConstants.UNSECTIONED_LABEL
            lines.append("")
            lines.append(f"{label} ({len(section)})")
            for row_number, team_id in enumerate(section.row_ids, start=1):
                team = teams.get(team_id)
                if team is None:
                    continue
                lines.append(format_row(f"{section_number}.{row_number}", team))
        return "\n".join(lines)

    def close(self):
        self.controller.remove_observer(self._handle)
