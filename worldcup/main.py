#!/usr/bin/env python3
"""
World Cup team board entry point.

Sets up the database, imports the seed teams into an empty store, loads the
live view and runs one command against it:

    worldcup list
    worldcup add "Wenderland" "Oceania"
    worldcup win 2 1        # record a win for section 2, row 1 (as listed)
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from worldcup.config import Config
from worldcup.data_models.query import teams_by_zone
from worldcup.data_models.team import TeamRecord
from worldcup.database.database import Database
from worldcup.operations.seed_operations import SeedOperations
from worldcup.operations.team_operations import TeamOperations
from worldcup.services.live_view import LiveViewController
from worldcup.utils.exceptions import WorldCupException
from worldcup.utils.logger import setup_logger
from worldcup.views.team_table import TeamTableView


class WorldCupApp:
    def __init__(self, database_url: Optional[str] = None, seed_file: Optional[str] = None):
        self.logger = setup_logger(__name__)
        self.db = Database(database_url)
        self.seed_file = seed_file
        self.team_ops: Optional[TeamOperations] = None
        self.controller: Optional[LiveViewController] = None
        self.table: Optional[TeamTableView] = None

    async def setup(self):
        """Called when the application is starting up"""
        self.logger.info("Setting up World Cup board...")
        Config.validate()

        await self.db.initialize()
        self.team_ops = TeamOperations(self.db)

        await SeedOperations(self.team_ops, seed_file=self.seed_file).import_if_needed()

        self.controller = LiveViewController(self.team_ops)
        await self.controller.initialize(teams_by_zone())
        self.table = TeamTableView(self.controller)

        self.logger.info("World Cup board setup complete!")

    async def add_team(self, team_name: str, qualifying_zone: str) -> int:
        """Add a team with the default image"""
        return await self.team_ops.insert(TeamRecord(
            team_name=team_name,
            qualifying_zone=qualifying_zone,
            image_name=Config.DEFAULT_IMAGE_NAME,
        ))

    async def record_win(self, section: int, row: int) -> TeamRecord:
        """Increment wins for the team at a 0-based (section, row)"""
        team_id = self.controller.object_id_at(section, row)
        return await self.team_ops.increment_wins(team_id)

    async def close(self):
        if self.table:
            self.table.close()
        if self.controller:
            await self.controller.teardown()
        await self.db.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="worldcup", description="World Cup team board")
    parser.add_argument("--database-url", help="Database URL (default: DATABASE_URL)")
    parser.add_argument("--seed-file", help="Seed JSON file (default: SEED_FILE)")

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("list", help="Show the board")

    add_parser = subparsers.add_parser("add", help="Add a team")
    add_parser.add_argument("name", help="Team name")
    add_parser.add_argument("zone", help="Qualifying zone")

    win_parser = subparsers.add_parser("win", help="Record a win for a listed team")
    win_parser.add_argument("section", type=int, help="Section number as listed (1-based)")
    win_parser.add_argument("row", type=int, help="Row number as listed (1-based)")
    return parser


async def run(args: argparse.Namespace) -> int:
    app = WorldCupApp(database_url=args.database_url, seed_file=args.seed_file)
    try:
        await app.setup()

        if args.command == "add":
            team_id = await app.add_team(args.name, args.zone)
            print(f"Added team {team_id}: {args.name} ({args.zone})")
        elif args.command == "win":
            team = await app.record_win(args.section - 1, args.row - 1)
            print(f"{team.team_name} now has {team.wins} wins")

        for line in app.table.change_log:
            print(f"~ {line}")
        print(await app.table.render())
        return 0
    except WorldCupException as e:
        app.logger.error(str(e))
        print(e.user_message, file=sys.stderr)
        return 1
    finally:
        await app.close()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
