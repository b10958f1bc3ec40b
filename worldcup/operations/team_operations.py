"""
Team Operations Module

This module is the record store for teams. It owns every Team row and is the
single entry point for mutating them.

Key functionality:
- insert() / insert_many(): create teams, the store assigns identity
- update() / increment_wins(): mutate a stored team in place
- get() / get_many() / count() / fetch(): read access as detached TeamRecords
- subscribe() / unsubscribe(): change listeners for live views

Mutations are serialized: one mutation commits and notifies every active
listener before the next one is accepted, so listeners observe commits in
order and exactly once each. Notifications carry no payload; listeners
re-read whatever state they need.
"""

import asyncio
import inspect
from typing import Callable, Dict, Iterable, List, Optional

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError

from worldcup.data_models.team import TeamRecord
from worldcup.database.models import Team
from worldcup.utils.exceptions import (
    PersistenceError, TeamNotFoundError, TeamValidationError
)
from worldcup.utils.logger import setup_logger

logger = setup_logger(__name__)


def validate_team(record: TeamRecord) -> None:
    """
    Check team field values before they reach the database.

    Raises:
        TeamValidationError: If any field has the wrong type or range
    """
    if not isinstance(record.team_name, str):
        raise TeamValidationError('team_name', "Team name must be text.")
    if not isinstance(record.qualifying_zone, str):
        raise TeamValidationError('qualifying_zone', "Qualifying zone must be text.")
    if isinstance(record.wins, bool) or not isinstance(record.wins, int):
        raise TeamValidationError('wins', "Wins must be a whole number.")
    if record.wins < 0:
        raise TeamValidationError('wins', "Wins cannot be negative.")
    if record.image_name is not None and not isinstance(record.image_name, str):
        raise TeamValidationError('image_name', "Image name must be text.")


class Subscription:
    """Handle for a registered change listener."""

    def __init__(self, listener: Callable):
        self.listener = listener
        self.active = True
        self._idle = asyncio.Event()
        self._idle.set()

    def cancel(self):
        """Stop deliveries to this listener from now on."""
        self.active = False

    async def wait_idle(self):
        """Wait until no delivery to this listener is running."""
        await self._idle.wait()


class TeamOperations:
    """
    Record store for teams with serialized mutations and change notification.
    """

    def __init__(self, database):
        """Initialize with database instance"""
        self.db = database
        self.logger = logger
        self._write_lock = asyncio.Lock()
        self._subscriptions: List[Subscription] = []
        self._dispatch_task: Optional[asyncio.Task] = None

    # Mutations

    async def insert(self, record: TeamRecord) -> int:
        """
        Persist a new team and notify listeners.

        The record's own id is ignored; the store assigns identity.

        Returns:
            int: Id of the new team

        Raises:
            TeamValidationError: If field values are rejected
            PersistenceError: If the commit fails
        """
        ids = await self._insert_rows([record], "insert team")
        return ids[0]

    async def insert_many(self, records: Iterable[TeamRecord]) -> List[int]:
        """
        Persist several teams in one transaction with a single notification.

        Every record is validated before anything is written.
        """
        records = list(records)
        if not records:
            return []
        return await self._insert_rows(records, f"insert {len(records)} teams")

    async def update(self, team_id: int, mutator: Callable[[Team], None]) -> TeamRecord:
        """
        Apply mutator to a stored team row and commit the result.

        If the mutator leaves every field unchanged nothing is committed and no
        notification is sent.

        Args:
            team_id: Id of the team to update
            mutator: Callable receiving the Team row to modify in place

        Returns:
            TeamRecord: The team as stored after the update

        Raises:
            TeamNotFoundError: If no team has this id
            TeamValidationError: If the mutated values are rejected
            PersistenceError: If the commit fails
        """
        async with self._mutation():
            async with self.db.get_session() as session:
                row = await session.get(Team, team_id)
                if row is None:
                    raise TeamNotFoundError(team_id)

                before = TeamRecord.from_row(row)
                mutator(row)
                after = TeamRecord.from_row(row)

                if after.id != before.id:
                    raise TeamValidationError('id', "Team identity cannot change.")
                validate_team(after)

                if after == before:
                    self.logger.debug(f"Update of team {team_id} changed nothing, skipping commit")
                    return after

                await self._commit(session, f"update team {team_id}")

            self.logger.debug(f"Updated team {team_id}: {before.fingerprint()} -> {after.fingerprint()}")
            await self._notify()
        return after

    async def increment_wins(self, team_id: int, amount: int = 1) -> TeamRecord:
        """Record wins for a team (the row-selection action)."""
        def add_wins(row: Team):
            row.wins = row.wins + amount

        return await self.update(team_id, add_wins)

    # Reads

    async def get(self, team_id: int) -> TeamRecord:
        """Get a team by id, raising TeamNotFoundError if absent"""
        async with self.db.get_session() as session:
            row = await session.get(Team, team_id)
            if row is None:
                raise TeamNotFoundError(team_id)
            return TeamRecord.from_row(row)

    async def get_many(self, team_ids: Iterable[int]) -> Dict[int, TeamRecord]:
        """Get teams by id; missing ids are absent from the result"""
        team_ids = list(team_ids)
        if not team_ids:
            return {}
        records = await self.fetch(select(Team).where(Team.id.in_(team_ids)))
        return {record.id: record for record in records}

    async def count(self, *criteria) -> int:
        """Count teams matching all criteria (every team when none are given)"""
        statement = select(func.count(Team.id))
        if criteria:
            statement = statement.where(*criteria)
        async with self.db.get_session() as session:
            result = await session.execute(statement)
            return result.scalar_one()

    async def fetch(self, statement) -> List[TeamRecord]:
        """Execute a select(Team) statement and detach the rows"""
        async with self.db.get_session() as session:
            result = await session.execute(statement)
            return [TeamRecord.from_row(row) for row in result.scalars().all()]

    # Subscriptions

    def subscribe(self, listener: Callable) -> Subscription:
        """
        Register a change listener.

        The listener is called with no arguments after every committed
        mutation. It may be a plain function or a coroutine function.
        """
        subscription = Subscription(listener)
        self._subscriptions.append(subscription)
        self.logger.debug(f"Added change listener {listener!r}")
        return subscription

    async def unsubscribe(self, subscription: Subscription):
        """
        Revoke a subscription.

        After this returns the listener receives no further notifications and
        no delivery to it is still running, unless the call is made from
        inside that listener's own delivery.
        """
        subscription.cancel()
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

        if self._dispatch_task is not None and self._dispatch_task is asyncio.current_task():
            return
        await subscription.wait_idle()

    @property
    def subscriber_count(self) -> int:
        return sum(1 for subscription in self._subscriptions if subscription.active)

    # Internals

    async def _insert_rows(self, records: List[TeamRecord], operation: str) -> List[int]:
        for record in records:
            validate_team(record)

        async with self._mutation():
            async with self.db.get_session() as session:
                rows = [
                    Team(
                        team_name=record.team_name,
                        qualifying_zone=record.qualifying_zone,
                        wins=record.wins,
                        image_name=record.image_name,
                    )
                    for record in records
                ]
                session.add_all(rows)
                await self._commit(session, operation)
                ids = [row.id for row in rows]

            self.logger.debug(f"Committed {operation}: ids {ids}")
            await self._notify()
        return ids

    def _mutation(self):
        if self._dispatch_task is not None and self._dispatch_task is asyncio.current_task():
            raise RuntimeError("Teams cannot be mutated from inside a change notification")
        return self._write_lock

    async def _commit(self, session, operation: str):
        try:
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            self.logger.error(f"Commit failed during {operation}: {e}")
            raise PersistenceError(operation, str(e)) from e

    async def _notify(self):
        self._dispatch_task = asyncio.current_task()
        try:
            for subscription in list(self._subscriptions):
                if not subscription.active:
                    continue
                subscription._idle.clear()
                try:
                    result = subscription.listener()
                    if inspect.isawaitable(result):
                        await result
                except Exception as e:
                    self.logger.error(f"Change listener {subscription.listener!r} failed: {e}", exc_info=True)
                finally:
                    subscription._idle.set()
        finally:
            self._dispatch_task = None
