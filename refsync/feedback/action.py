"""Feedback migrations — named sequences of actions reacting to an event.

A ``Feedback`` binds an origin and a destination endpoint to an ordered list
of ``Action`` objects. Running it for a triggering ref gives every action its
own :class:`FeedbackContext` and collects the outcome of each one.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from refsync.console import Console
from refsync.effects import DestinationEffect
from refsync.endpoints import Endpoint, NoopEndpoint
from refsync.exceptions import FeedbackRunError, ValidationError
from refsync.feedback.context import ActionBody, FeedbackContext
from refsync.feedback.result import ActionResult, ResultKind

logger = logging.getLogger(__name__)


@dataclass
class Action:
    """A user-authored action body plus the parameters it is bound to."""

    name: str
    body: ActionBody
    params: Mapping[str, Any] = field(default_factory=dict)

    def run(self, context: FeedbackContext) -> None:
        """Run the body on a child context bound to this action's params.

        The result is validated and stored on *context*, and the child's
        effects are merged into it once the body has returned.
        """
        action_context = context.with_params(self.params)
        result = self.body(action_context)
        context.finish(result, action_context)


@dataclass(frozen=True)
class ActionOutcome:
    """What one action of a feedback run produced."""

    action_name: str
    result: ActionResult
    effects: tuple[DestinationEffect, ...] = ()


class RunStatus:
    SUCCESS = "success"
    NOOP = "noop"
    ERROR = "error"


@dataclass
class FeedbackRun:
    """Outcomes of running a feedback migration for one ref."""

    feedback_name: str
    ref: str | None
    outcomes: list[ActionOutcome] = field(default_factory=list)

    @property
    def status(self) -> str:
        if any(o.result.is_error for o in self.outcomes):
            return RunStatus.ERROR
        if all(o.result.is_noop for o in self.outcomes):
            return RunStatus.NOOP
        return RunStatus.SUCCESS

    @property
    def effects(self) -> list[DestinationEffect]:
        return [e for o in self.outcomes for e in o.effects]

    def summary(self) -> str:
        counts = {kind: 0 for kind in ResultKind}
        for outcome in self.outcomes:
            counts[outcome.result.kind] += 1
        return (
            f"Feedback '{self.feedback_name}' ({self.status}): "
            f"{counts[ResultKind.SUCCESS]} success, {counts[ResultKind.NO_OP]} noop, "
            f"{counts[ResultKind.ERROR]} error, {len(self.effects)} effects"
        )


@dataclass
class Feedback:
    """A feedback migration: endpoints plus the actions to run on an event."""

    name: str
    actions: list[Action] = field(default_factory=list)
    origin: Endpoint = field(default_factory=NoopEndpoint)
    destination: Endpoint = field(default_factory=NoopEndpoint)
    description: str = ""

    def run(self, ref: str | None, console: Console) -> FeedbackRun:
        """Run every action in order for the triggering *ref*.

        An action returning ``error()`` stops the run; the remaining actions
        are skipped. A malformed action result raises ``FeedbackRunError``
        carrying the outcomes of the actions that finished before it.
        """
        run = FeedbackRun(feedback_name=self.name, ref=ref)
        for action in self.actions:
            context = FeedbackContext(self, action, ref, console)
            try:
                action.run(context)
            except ValidationError as e:
                raise FeedbackRunError(str(e), run) from e
            result = context.action_result
            run.outcomes.append(
                ActionOutcome(action.name, result, tuple(context.effects))
            )
            if result.is_error:
                skipped = len(self.actions) - len(run.outcomes)
                if skipped:
                    console.warn(
                        f"Feedback '{self.name}' aborted after action '{action.name}'; "
                        f"{skipped} action(s) skipped"
                    )
                break

        logger.info("%s", run.summary())
        return run
