"""
Seed Operations Module

Imports the bundled team list into an empty store.

The seed file is a JSON array of objects with string fields ``teamName``,
``qualifyingZone``, ``imageName`` and a numeric ``wins``. Import only runs
when the store holds no teams.

Malformed entries are handled by policy:
- lenient (default): the entry is skipped and logged, valid entries are imported
- strict: the first malformed entry fails the whole import before anything is written

An unreadable file or a top-level value that is not an array always fails.
Valid entries are written with one insert_many() call, i.e. one transaction
and one trailing commit.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Tuple, Union

from worldcup.config import Config
from worldcup.constants import SeedFields
from worldcup.data_models.team import TeamRecord
from worldcup.utils.exceptions import SeedImportError
from worldcup.utils.logger import setup_logger

logger = setup_logger(__name__)


@dataclass
class SeedImportReport:
    """Outcome of a seed import."""
    source: str
    imported_ids: List[int] = field(default_factory=list)
    rejected: List[Tuple[int, str]] = field(default_factory=list)

    @property
    def imported_count(self) -> int:
        return len(self.imported_ids)


def load_seed_file(path: Union[str, Path]) -> List[Any]:
    """
    Read the seed file and return its top-level array.

    Raises:
        SeedImportError: If the file cannot be read, is not JSON, or is not an array
    """
    path = Path(path)
    try:
        with path.open('r', encoding='utf-8') as f:
            data = json.load(f)
    except OSError as e:
        raise SeedImportError(str(path), f"cannot read file: {e}") from e
    except json.JSONDecodeError as e:
        raise SeedImportError(str(path), f"invalid JSON: {e}") from e

    if not isinstance(data, list):
        raise SeedImportError(str(path), "top-level value must be an array")
    return data


def _required_string(entry: dict, key: str) -> str:
    value = entry.get(key)
    if not isinstance(value, str):
        raise ValueError(f"'{key}' must be a string")
    return value


def parse_seed_entry(entry: Any) -> TeamRecord:
    """
    Convert one seed object into a TeamRecord.

    Raises:
        ValueError: If a field is missing or has the wrong type
    """
    if not isinstance(entry, dict):
        raise ValueError("entry must be an object")

    team_name = _required_string(entry, SeedFields.TEAM_NAME)
    qualifying_zone = _required_string(entry, SeedFields.QUALIFYING_ZONE)
    image_name = _required_string(entry, SeedFields.IMAGE_NAME)

    wins = entry.get(SeedFields.WINS)
    if isinstance(wins, bool) or not isinstance(wins, (int, float)):
        raise ValueError(f"'{SeedFields.WINS}' must be a number")
    if isinstance(wins, float):
        if not wins.is_integer():
            raise ValueError(f"'{SeedFields.WINS}' must be a whole number")
        wins = int(wins)
    if wins < 0:
        raise ValueError(f"'{SeedFields.WINS}' cannot be negative")

    return TeamRecord(
        team_name=team_name,
        qualifying_zone=qualifying_zone,
        wins=wins,
        image_name=image_name,
    )


class SeedOperations:
    """Imports seed teams through the team store."""

    def __init__(self, team_ops, seed_file: Optional[Union[str, Path]] = None, strict: Optional[bool] = None):
        self.team_ops = team_ops
        self.seed_file = Path(seed_file or Config.SEED_FILE)
        self.strict = Config.SEED_STRICT if strict is None else strict
        self.logger = logger

    async def import_if_needed(self) -> Optional[SeedImportReport]:
        """Import the seed file only when the store is empty"""
        team_count = await self.team_ops.count()
        if team_count > 0:
            self.logger.debug(f"Store already holds {team_count} teams, skipping seed import")
            return None
        return await self.import_all()

    async def import_all(self) -> SeedImportReport:
        """
        Import every valid entry of the seed file.

        Raises:
            SeedImportError: If the file is unusable, or on a malformed entry in strict mode
            PersistenceError: If the commit fails
        """
        source = str(self.seed_file)
        entries = load_seed_file(self.seed_file)
        report = SeedImportReport(source=source)

        records = []
        for index, entry in enumerate(entries):
            try:
                records.append(parse_seed_entry(entry))
            except ValueError as e:
                if self.strict:
                    raise SeedImportError(source, f"entry {index}: {e}") from e
                self.logger.warning(f"Skipping seed entry {index} from {source}: {e}")
                report.rejected.append((index, str(e)))

        report.imported_ids = await self.team_ops.insert_many(records)
        self.logger.info(
            f"Imported {report.imported_count} teams from {source}"
            + (f" ({len(report.rejected)} rejected)" if report.rejected else "")
        )
        return report
