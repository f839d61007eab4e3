"""Feedback actions — user-authored reactions to migration events.

This package provides:
- ActionResult: the success / noop / error outcome every action must return
- FeedbackContext: the per-invocation state an action body runs against
- Action and Feedback: binding bodies to parameters and running them in order
"""

from refsync.feedback.action import Action, ActionOutcome, Feedback, FeedbackRun, RunStatus
from refsync.feedback.context import FeedbackContext
from refsync.feedback.result import ActionResult, ResultKind

__all__ = [
    "Action",
    "ActionOutcome",
    "ActionResult",
    "Feedback",
    "FeedbackContext",
    "FeedbackRun",
    "ResultKind",
    "RunStatus",
]
