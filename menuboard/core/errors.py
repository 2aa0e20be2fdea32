"""
Menu Board — Domain errors

Every error carries the HTTP status it maps to; a single exception handler
in main.py turns them into {"detail": ...} responses.
"""


class MenuBoardError(Exception):
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(MenuBoardError):
    """Patch/delete/lookup on an id that does not exist."""
    status_code = 404


class ValidationError(MenuBoardError):
    """Mutation payload rejected before any write."""
    status_code = 422


class DuplicateConstraint(MenuBoardError):
    """A uniqueness rule the store does not enforce on its own was violated."""
    status_code = 409


class EmptyOrder(MenuBoardError):
    status_code = 400


class UnresolvedForeignKey(MenuBoardError):
    """
    A reconciled row references a category that does not exist.
    Recorded per row in the batch result, never raised to the caller.
    """
    status_code = 422


class ExternalFetchError(MenuBoardError):
    """Timeout or non-2xx response from the spreadsheet or exchange-rate source."""
    status_code = 502
