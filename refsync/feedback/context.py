"""Feedback context — the state and API one feedback action runs against.

A context is created per action invocation. The action body receives it,
reads the triggering ref and parameters, records effects on the destination,
and returns one of ``success()``, ``noop()`` or ``error()``. ``finish`` then
validates that result, reports it on the console, and pulls in effects that
were recorded on child contexts.

Child contexts come from ``with_params``: same identity, new parameters, and
their own empty effect list. Their effects only reach the parent through an
explicit merge, which happens after the child has returned.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from refsync.effects import DestinationEffect, DestinationRef, OriginRef, updated_effect
from refsync.exceptions import InvariantError, check_condition
from refsync.feedback.result import ActionResult, ResultKind

if TYPE_CHECKING:
    from refsync.console import Console
    from refsync.endpoints import Endpoint
    from refsync.feedback.action import Action, Feedback

logger = logging.getLogger(__name__)

ActionBody = Callable[["FeedbackContext"], Any]

_BAD_RESULT = (
    "Feedback actions must return a result via built-in functions: success(), "
    "error(), noop() return, but '%s' returned: %s"
)


class FeedbackContext:
    """Per-invocation state of a feedback action."""

    def __init__(
        self,
        feedback: Feedback,
        action: Action,
        ref: str | None,
        console: Console,
        params: Mapping[str, Any] | None = None,
    ):
        self._feedback = feedback
        self._action = action
        self._ref = ref
        self._console = console
        self._params: Mapping[str, Any] = MappingProxyType(dict(params or {}))
        self._effects: list[DestinationEffect] = []
        self._result: ActionResult | None = None

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    def feedback_name(self) -> str:
        return self._feedback.name

    @property
    def action_name(self) -> str:
        return self._action.name

    @property
    def ref(self) -> str | None:
        """The entity that triggered the event, if any."""
        return self._ref

    @property
    def console(self) -> Console:
        return self._console

    @property
    def params(self) -> Mapping[str, Any]:
        return self._params

    @property
    def origin(self) -> Endpoint:
        return self._feedback.origin.with_console(self._console)

    @property
    def destination(self) -> Endpoint:
        return self._feedback.destination.with_console(self._console)

    # ------------------------------------------------------------------
    # Results and effects available to action bodies
    # ------------------------------------------------------------------

    def success(self) -> ActionResult:
        return ActionResult.success()

    def noop(self, msg: str | None = None) -> ActionResult:
        return ActionResult.noop(msg)

    def error(self, msg: str) -> ActionResult:
        return ActionResult.error(msg)

    def record_effect(
        self,
        summary: str,
        origin_refs: Iterable[OriginRef],
        destination_ref: DestinationRef,
        errors: Iterable[str] = (),
    ) -> DestinationEffect:
        """Record an ``UPDATED`` effect of the current action."""
        effect = updated_effect(summary, destination_ref, origin_refs, errors)
        self._effects.append(effect)
        return effect

    @property
    def effects(self) -> list[DestinationEffect]:
        """Effects recorded so far, in recording order. A copy."""
        return list(self._effects)

    # ------------------------------------------------------------------
    # Child contexts
    # ------------------------------------------------------------------

    def with_params(self, params: Mapping[str, Any]) -> "FeedbackContext":
        """Return a child context bound to *params* with a fresh effect list."""
        return FeedbackContext(self._feedback, self._action, self._ref, self._console, params)

    def merge_effects(self, child: "FeedbackContext") -> None:
        """Append the effects recorded on *child* to this context."""
        if child is self:
            raise InvariantError("A feedback context cannot merge its own effects")
        self._effects.extend(child._effects)

    def delegate(self, body: ActionBody, params: Mapping[str, Any] | None = None) -> ActionResult:
        """Run *body* on a child context and absorb its effects.

        The child is bound to *params* (or to this context's parameters when
        omitted) and finished like any top-level action before its effects
        are merged here.
        """
        child = self.with_params(self._params if params is None else params)
        result = body(child)
        child.finish(result, child)
        self.merge_effects(child)
        return child.action_result

    # ------------------------------------------------------------------
    # Termination
    # ------------------------------------------------------------------

    def finish(self, result: Any, action_context: "FeedbackContext") -> None:
        """Validate and report the value an action body returned.

        Args:
            result: Whatever the action body returned.
            action_context: The context the body actually ran against. When
                it is a child of this context, its effects are merged here.

        Raises:
            ValidationError: If *result* is not an :class:`ActionResult`.
            InvariantError: If this context already holds a result.
        """
        if self._result is not None:
            raise InvariantError(
                f"Action '{self.action_name}' already finished with {self._result}. This is a bug."
            )
        check_condition(result is not None, _BAD_RESULT, self.action_name, None)
        check_condition(isinstance(result, ActionResult), _BAD_RESULT, self.action_name, repr(result))

        self._result = result
        if result.kind == ResultKind.ERROR:
            self._console.error_fmt("Action '%s' returned error: %s", self.action_name, result.message)
        elif result.kind == ResultKind.NO_OP:
            self._console.info_fmt("Action '%s' returned noop: %s", self.action_name, result.message)
        else:
            self._console.info_fmt("Action '%s' returned success", self.action_name)

        if action_context is not self:
            self.merge_effects(action_context)
        logger.debug(
            "Action %s/%s finished (%s) with %d effects",
            self.feedback_name,
            self.action_name,
            result.kind.value,
            len(self._effects),
        )

    @property
    def action_result(self) -> ActionResult:
        if self._result is None:
            raise InvariantError(
                f"Action result for '{self.action_name}' should be set. This is a bug."
            )
        return self._result
