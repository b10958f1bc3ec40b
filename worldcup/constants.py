"""
Application-wide constants for the World Cup team board.

This module contains the field names and display values used throughout
the codebase to improve maintainability and clarity.
"""


class TeamFields:
    """Column names of the Team model used by query specifications."""

    TEAM_NAME = "team_name"
    QUALIFYING_ZONE = "qualifying_zone"
    WINS = "wins"
    IMAGE_NAME = "image_name"

    # Columns a query specification may sort or section on
    SORTABLE = (TEAM_NAME, QUALIFYING_ZONE, WINS, IMAGE_NAME)


class SeedFields:
    """Keys of a seed JSON entry."""

    TEAM_NAME = "teamName"
    QUALIFYING_ZONE = "qualifyingZone"
    IMAGE_NAME = "imageName"
    WINS = "wins"


class DisplayConstants:
    """Constants for the text table presentation."""

    TITLE = "World Cup"
    WINS_LABEL = "Wins"

    # Width of the team name column
    NAME_COLUMN_WIDTH = 24

    # Label used for a section without a key value
    UNSECTIONED_LABEL = "All Teams"
