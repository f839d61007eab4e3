"""Exception types shared across refsync."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from refsync.feedback.action import FeedbackRun


class ValidationError(ValueError):
    """A recoverable problem with user-provided input or action output.

    The surrounding pipeline decides whether to continue with the next unit
    of work.
    """


class ConfigError(ValidationError):
    """The feedback configuration could not be loaded."""


class FeedbackRunError(ValidationError):
    """An action of a feedback run failed validation.

    ``run`` holds the outcomes of the actions that finished before it, so
    their effects can still be recorded.
    """

    def __init__(self, message: str, run: FeedbackRun):
        super().__init__(message)
        self.run = run


class RepositoryError(ValueError):
    """A path is not a usable git repository, or a git operation failed."""


class InvariantError(RuntimeError):
    """Internal state was used in a way that can only be a bug."""


def check_condition(condition: bool, fmt: str, *args: object) -> None:
    """Raise :class:`ValidationError` with ``fmt % args`` unless *condition* holds."""
    if not condition:
        raise ValidationError(fmt % args if args else fmt)
