"""
Custom exceptions for the team board with user-friendly error messages.
"""

class WorldCupException(Exception):
    """Base exception for team board errors."""
    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message

class TeamNotFoundError(WorldCupException):
    """Raised when a team id does not reference a stored team."""
    def __init__(self, team_id):
        self.team_id = team_id
        super().__init__(
            f"Team {team_id} not found",
            "❌ That team no longer exists!"
        )

class TeamValidationError(WorldCupException):
    """Raised when team field values are rejected."""
    def __init__(self, field: str, reason: str):
        self.field = field
        super().__init__(
            f"Invalid value for {field}: {reason}",
            f"❌ {reason}"
        )

class InvalidSpecError(WorldCupException):
    """Raised when a query specification cannot be evaluated."""
    def __init__(self, reason: str):
        super().__init__(
            f"Invalid query specification: {reason}",
            "❌ The board is misconfigured."
        )

class IndexOutOfRangeError(WorldCupException, IndexError):
    """Raised when a section/row index is outside the current snapshot."""
    def __init__(self, section: int, row: int = None):
        self.section = section
        self.row = row
        location = f"section {section}" if row is None else f"section {section}, row {row}"
        super().__init__(
            f"Index out of range: {location}",
            "❌ That row is not on the board."
        )

class SeedImportError(WorldCupException):
    """Raised when seed data cannot be read or a seed entry is malformed."""
    def __init__(self, source: str, details: str):
        self.source = source
        super().__init__(
            f"Seed import from {source} failed: {details}",
            "❌ Could not load the initial teams."
        )

class PersistenceError(WorldCupException):
    """Raised when a database commit fails."""
    def __init__(self, operation: str, details: str = None):
        self.operation = operation
        super().__init__(
            f"Database error during {operation}: {details}",
            "❌ Database error occurred. Please try again later."
        )
