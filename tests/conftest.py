"""Pytest configuration and fixtures."""

import os

# Keep test runs from writing log files
os.environ.setdefault("LOG_TO_FILE", "false")

import pytest
import pytest_asyncio

from worldcup.data_models.team import TeamRecord
from worldcup.database.database import Database
from worldcup.operations.team_operations import TeamOperations
from worldcup.services.live_view import LiveViewController, ViewState


@pytest_asyncio.fixture
async def db():
    """Create a temporary in-memory database for testing."""
    database = Database("sqlite+aiosqlite:///:memory:")
    await database.initialize()
    try:
        yield database
    finally:
        await database.close()


@pytest_asyncio.fixture
async def team_ops(db):
    return TeamOperations(db)


@pytest_asyncio.fixture
async def controller(team_ops):
    live_view = LiveViewController(team_ops)
    try:
        yield live_view
    finally:
        if live_view.state is ViewState.LOADED:
            await live_view.teardown()


@pytest.fixture
def make_team():
    """Build an unsaved TeamRecord with sensible defaults."""
    def _make(team_name, qualifying_zone, wins=0, image_name=None):
        return TeamRecord(
            team_name=team_name,
            qualifying_zone=qualifying_zone,
            wins=wins,
            image_name=image_name,
        )
    return _make
