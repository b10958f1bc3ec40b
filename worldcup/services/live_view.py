"""
Live view controller for the team board.

Keeps a materialized, sectioned and sorted snapshot of a query over the team
store. Every store notification re-evaluates the query, diffs the new
snapshot against the previous one and hands the resulting operations to the
registered observers.

The current snapshot is published by swapping a single reference, so a reader
always sees one complete snapshot generation.
"""

import asyncio
import inspect
from enum import Enum
from typing import Callable, List, Optional, Tuple

from worldcup.data_models.query import QuerySpec
from worldcup.data_models.snapshot import (
    Operation, SectionInfo, SectionSnapshot, Snapshot
)
from worldcup.data_models.team import TeamRecord
from worldcup.services.query_evaluator import evaluate, group_sections, validate_spec
from worldcup.services.reconciler import diff
from worldcup.utils.exceptions import IndexOutOfRangeError, TeamNotFoundError
from worldcup.utils.logger import setup_logger

logger = setup_logger(__name__)


class ViewState(Enum):
    UNINITIALIZED = "uninitialized"
    LOADED = "loaded"
    TORN_DOWN = "torn_down"


class ObserverHandle:
    """Handle returned by add_observer()."""

    def __init__(self, callback: Callable):
        self.callback = callback
        self.active = True


def build_snapshot(records: List[TeamRecord], spec: QuerySpec, generation: int = 0) -> Snapshot:
    """Build a snapshot from records already ordered by spec"""
    sections = tuple(
        SectionSnapshot(key, tuple(record.id for record in group))
        for key, group in group_sections(records, spec)
    )
    fingerprints = {record.id: record.fingerprint() for record in records}
    return Snapshot(sections=sections, fingerprints=fingerprints, generation=generation)


class LiveViewController:
    """Sectioned live view over the team store."""

    def __init__(self, team_ops):
        self.team_ops = team_ops
        self.spec: Optional[QuerySpec] = None
        self._state = ViewState.UNINITIALIZED
        self._snapshot = Snapshot()
        self._observers: List[ObserverHandle] = []
        self._subscription = None
        self._refresh_lock = asyncio.Lock()

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    async def initialize(self, spec: QuerySpec) -> Snapshot:
        """
        Perform the initial fetch and start following store changes.

        The store subscription is taken before the first fetch. A change
        committed while the fetch runs waits for the refresh lock and is
        re-evaluated against the loaded snapshot.

        Raises:
            InvalidSpecError: If spec cannot be evaluated
            RuntimeError: If the controller was already initialized
        """
        if self._state is not ViewState.UNINITIALIZED:
            raise RuntimeError(f"Live view cannot be initialized from state {self._state.value}")

        validate_spec(spec)
        self.spec = spec
        subscription = self.team_ops.subscribe(self.on_store_changed)
        try:
            async with self._refresh_lock:
                records = await evaluate(spec, self.team_ops)
                self._snapshot = build_snapshot(records, spec, generation=1)
                self._subscription = subscription
                self._state = ViewState.LOADED
        except Exception:
            await self.team_ops.unsubscribe(subscription)
            raise

        logger.info(
            f"Live view loaded {len(self._snapshot)} teams in "
            f"{len(self._snapshot.sections)} sections"
        )
        return self._snapshot

    async def on_store_changed(self) -> List[Operation]:
        """
        Re-evaluate the query and publish the new snapshot.

        Returns:
            List of operations transforming the previous snapshot into the new one
        """
        async with self._refresh_lock:
            if self._state is not ViewState.LOADED:
                return []
            previous = self._snapshot
            records = await evaluate(self.spec, self.team_ops)
            candidate = build_snapshot(records, self.spec, generation=previous.generation + 1)
            operations = diff(previous, candidate)
            self._snapshot = candidate

        logger.debug(f"Snapshot generation {candidate.generation}: {len(operations)} operations")
        if operations:
            await self._emit(operations, candidate)
        return operations

    def add_observer(self, callback: Callable) -> ObserverHandle:
        """
        Register callback(operations, snapshot) for every non-empty change.

        The callback may be a plain function or a coroutine function.
        """
        handle = ObserverHandle(callback)
        self._observers.append(handle)
        return handle

    def remove_observer(self, handle: ObserverHandle):
        handle.active = False
        if handle in self._observers:
            self._observers.remove(handle)

    def sections(self) -> List[SectionInfo]:
        """Section labels and row counts of the current snapshot"""
        return [SectionInfo(section.key, len(section)) for section in self._snapshot.sections]

    def fetched_ids(self) -> List[int]:
        return list(self._snapshot.iter_ids())

    def object_id_at(self, section: int, row: int) -> int:
        """
        Team id at (section, row) of the current snapshot.

        Raises:
            IndexOutOfRangeError: If the position is outside the snapshot
        """
        return self._id_at(self._snapshot, section, row)

    async def object_at(self, section: int, row: int) -> TeamRecord:
        """
        Team at (section, row) of the current snapshot.

        Raises:
            IndexOutOfRangeError: If the position is outside the snapshot
        """
        team_id = self._id_at(self._snapshot, section, row)
        try:
            return await self.team_ops.get(team_id)
        except TeamNotFoundError:
            raise IndexOutOfRangeError(section, row)

    def index_of(self, team_id: int) -> Optional[Tuple[int, int]]:
        """(section, row) of a team in the current snapshot, or None"""
        return self._snapshot.index_of(team_id)

    async def teardown(self):
        """Stop following the store; the controller cannot be reused"""
        if self._subscription is not None:
            await self.team_ops.unsubscribe(self._subscription)
            self._subscription = None
        self._observers.clear()
        self._state = ViewState.TORN_DOWN
        logger.debug("Live view torn down")

    @staticmethod
    def _id_at(snapshot: Snapshot, section: int, row: int) -> int:
        if not 0 <= section < len(snapshot.sections):
            raise IndexOutOfRangeError(section)
        row_ids = snapshot.sections[section].row_ids
        if not 0 <= row < len(row_ids):
            raise IndexOutOfRangeError(section, row)
        return row_ids[row]

    async def _emit(self, operations: List[Operation], snapshot: Snapshot):
        for handle in list(self._observers):
            if not handle.active:
                continue
            try:
                result = handle.callback(operations, snapshot)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Live view observer {handle.callback!r} failed: {e}", exc_info=True)
