"""
Custom exceptions

All workflow errors live here so the API layer can map them to HTTP
responses in one place.
"""
from typing import Iterable, Optional


class WorkflowException(Exception):
    """Base class for every submission workflow error"""
    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# ============ Input / precondition errors ============

class ValidationError(WorkflowException):
    """
    One or more preconditions failed

    Every violation is collected in `errors` so the caller can fix
    everything in a single round trip.
    """

    def __init__(self, message: str, errors: Optional[Iterable[str]] = None):
        super().__init__(message)
        self.errors = list(errors) if errors else [message]


# ============ State errors ============

class ConflictError(WorkflowException):
    """The current submission status does not allow the requested transition"""
    pass


class GameLocked(ConflictError):
    """
    Game is locked while In Review, developer edits are refused

    Reported as 403, like the other refused writes.
    """
    status_code = 403

    def __init__(self, game_id, action: str = "modified"):
        self.game_id = game_id
        super().__init__(f"Game is locked during review and cannot be {action}")


# ============ Lookup errors ============

class NotFoundError(WorkflowException):
    """Game, version, review or requested change does not exist (or is not visible)"""
    status_code = 404


class GameNotFound(NotFoundError):
    def __init__(self, game_id):
        self.game_id = game_id
        super().__init__("Game not found or you don't have access")


class VersionNotFound(NotFoundError):
    def __init__(self, version_id):
        self.version_id = version_id
        super().__init__(f"Version not found: {version_id}")


class ChangeNotFound(NotFoundError):
    def __init__(self, change_id):
        self.change_id = change_id
        super().__init__(f"Requested change not found: {change_id}")


class ScreenshotNotFound(NotFoundError):
    def __init__(self, screenshot_id):
        self.screenshot_id = screenshot_id
        super().__init__(f"Screenshot not found: {screenshot_id}")


# ============ Authorization errors ============

class AuthorizationError(WorkflowException):
    """Authenticated principal lacks the role required for the operation"""
    status_code = 403
