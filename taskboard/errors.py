"""
Board error kinds.

Each error carries the HTTP status the API layer answers with. Filesystem
failures are left as plain OSError and answered with 500.
"""


class BoardError(Exception):
    """Base class for all task board errors."""
    status_code = 500


class MissingConfig(BoardError):
    """The board config file is absent and creating it was declined."""
    pass


class NoValidColumns(BoardError):
    """The board config file holds no parseable column."""
    pass


class ValidationError(BoardError):
    """A column set is empty, has a malformed id, or repeats an id."""
    status_code = 400


class UnresolvedOrphan(BoardError):
    """An unconfigured folder still holds tasks and prompting is disabled."""
    pass


class Aborted(BoardError):
    """The operator aborted orphan folder resolution."""
    pass


class NotFound(BoardError):
    status_code = 404


class InvalidFolder(BoardError):
    """A create or move target is not a configured column."""
    status_code = 400


class Conflict(BoardError):
    """A task file already exists at the destination."""
    status_code = 409


class BadRequest(BoardError):
    status_code = 400


class ParseError(BoardError):
    """Task or config text could not be decoded."""
    pass
