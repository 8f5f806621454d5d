# domain/errors.py
"""Exceptions raised by the pricing engine, the workflow and the stores.

None of them is fatal: the UI catches them at the frame level and shows a
message, the session keeps running.
"""


class QuoteError(Exception):
    """Base class for all application errors."""


class RepositoryUnavailableError(QuoteError):
    """The cloud store could not list, upsert or delete."""


class ExportFailedError(QuoteError):
    """Rendering the approval image failed."""


class GuardViolationError(QuoteError):
    """A transition precondition is not met.

    `field` names the quote attribute the user has to fix, so the form can
    focus it.
    """

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class InvalidTransitionError(QuoteError):
    """The trigger is not allowed from the current status."""

    def __init__(self, status, trigger):
        super().__init__(f"Transição '{trigger.value}' inválida a partir do estado '{status.value}'")
        self.status = status
        self.trigger = trigger


class SubmissionInProgressError(QuoteError):
    """An export for approval is already running."""


class UnknownHeadcountError(QuoteError):
    """Labor headcount outside the rate table."""


class LastMaterialLineError(QuoteError):
    """A quote must keep at least one material line."""


class LocalStoreError(QuoteError):
    """The local SQLite copy could not be read or written (locked, corrupt file)."""
