"""Tests for feedback action results, effects and the feedback context."""

import pytest

from refsync.console import CapturingConsole, Severity
from refsync.effects import DestinationEffect, DestinationRef, EffectType, OriginRef
from refsync.endpoints import NoopEndpoint
from refsync.exceptions import FeedbackRunError, InvariantError, ValidationError
from refsync.feedback import (
    Action,
    ActionResult,
    Feedback,
    FeedbackContext,
    ResultKind,
    RunStatus,
)

DEST = DestinationRef(id="42", type="pull_request", url="https://example.com/pr/42")


def _context(action_name="act", ref="refs/heads/main", params=None, console=None, feedback=None):
    feedback = feedback or Feedback(name="notify")
    action = Action(name=action_name, body=lambda ctx: ctx.success())
    return FeedbackContext(feedback, action, ref, console or CapturingConsole(), params)


# --- ActionResult ---


def test_action_result_factories():
    assert ActionResult.success().kind == ResultKind.SUCCESS
    assert ActionResult.success().message is None

    noop = ActionResult.noop()
    assert noop.is_noop
    assert noop.message is None
    assert ActionResult.noop("nothing to do").message == "nothing to do"

    err = ActionResult.error("boom")
    assert err.is_error
    assert err.message == "boom"


def test_action_result_error_requires_message():
    with pytest.raises(ValidationError):
        ActionResult.error("")


def test_action_result_error_without_message_cannot_be_built():
    with pytest.raises(ValidationError, match="requires a message"):
        ActionResult(ResultKind.ERROR)
    assert ActionResult(ResultKind.NO_OP).message is None


def test_action_result_is_immutable():
    result = ActionResult.success()
    with pytest.raises(AttributeError):
        result.message = "changed"


def test_action_result_str():
    assert str(ActionResult.success()) == "success"
    assert str(ActionResult.noop("skip")) == "noop: skip"
    assert str(ActionResult.error("bad")) == "error: bad"


# --- DestinationEffect ---


def test_effect_defaults():
    effect = DestinationEffect(EffectType.UPDATED, "Commented", DEST)
    assert effect.origin_refs == ()
    assert effect.errors == ()


def test_effect_requires_summary():
    with pytest.raises(ValidationError):
        DestinationEffect(EffectType.UPDATED, "", DEST)


def test_effect_requires_destination_ref():
    with pytest.raises(ValidationError):
        DestinationEffect(EffectType.UPDATED, "Commented", None)


def test_effect_stores_sequences_as_tuples():
    effect = DestinationEffect(
        EffectType.UPDATED, "Commented", DEST, origin_refs=[OriginRef("abc")], errors=["e1"]
    )
    assert effect.origin_refs == (OriginRef("abc"),)
    assert effect.errors == ("e1",)


def test_effect_dict_round_trip():
    effect = DestinationEffect(
        EffectType.UPDATED, "Commented", DEST, origin_refs=[OriginRef("abc")], errors=["warn"]
    )
    assert DestinationEffect.from_dict(effect.to_dict()) == effect


# --- FeedbackContext identity ---


def test_context_identity():
    ctx = _context(action_name="comment", ref="refs/changes/1", params={"label": "ready"})
    assert ctx.feedback_name == "notify"
    assert ctx.action_name == "comment"
    assert ctx.ref == "refs/changes/1"
    assert ctx.params == {"label": "ready"}


def test_context_ref_can_be_none():
    assert _context(ref=None).ref is None


def test_context_params_are_read_only():
    ctx = _context(params={"a": 1})
    with pytest.raises(TypeError):
        ctx.params["b"] = 2


def test_context_endpoints_bound_to_console():
    console = CapturingConsole()
    ctx = _context(console=console)
    assert isinstance(ctx.origin, NoopEndpoint)
    assert ctx.origin.console is console
    assert ctx.destination.console is console


def test_context_result_helpers():
    ctx = _context()
    assert ctx.success() == ActionResult.success()
    assert ctx.noop() == ActionResult.noop()
    assert ctx.noop("msg") == ActionResult.noop("msg")
    assert ctx.error("bad") == ActionResult.error("bad")


def test_record_effect():
    ctx = _context()
    ctx.record_effect("Commented", [OriginRef("abc")], DEST)
    assert len(ctx.effects) == 1
    effect = ctx.effects[0]
    assert effect.type == EffectType.UPDATED
    assert effect.origin_refs == (OriginRef("abc"),)
    assert effect.errors == ()


def test_effects_property_is_a_copy():
    ctx = _context()
    ctx.record_effect("Commented", [], DEST)
    ctx.effects.clear()
    assert len(ctx.effects) == 1


# --- Termination contract ---


def test_finish_success_logs_info():
    console = CapturingConsole()
    ctx = _context(action_name="comment", console=console)
    ctx.finish(ctx.success(), ctx)
    assert ctx.action_result.is_success
    assert console.messages == [(Severity.INFO, "Action 'comment' returned success")]


def test_finish_noop_logs_message():
    console = CapturingConsole()
    ctx = _context(action_name="comment", console=console)
    ctx.finish(ctx.noop("already done"), ctx)
    assert console.messages == [(Severity.INFO, "Action 'comment' returned noop: already done")]


def test_finish_error_logs_error():
    console = CapturingConsole()
    ctx = _context(action_name="comment", console=console)
    ctx.finish(ctx.error("no permission"), ctx)
    assert ctx.action_result.is_error
    assert console.messages == [(Severity.ERROR, "Action 'comment' returned error: no permission")]


def test_finish_rejects_missing_result():
    ctx = _context(action_name="comment")
    with pytest.raises(ValidationError, match="'comment' returned: None"):
        ctx.finish(None, ctx)


@pytest.mark.parametrize("bad", ["success", True, 0, {"result": "success"}])
def test_finish_rejects_other_values(bad):
    ctx = _context(action_name="comment")
    with pytest.raises(ValidationError) as exc:
        ctx.finish(bad, ctx)
    assert "'comment'" in str(exc.value)
    assert repr(bad) in str(exc.value)


def test_result_before_finish_is_an_invariant_error():
    ctx = _context()
    with pytest.raises(InvariantError):
        ctx.action_result


def test_result_after_failed_validation_is_still_unset():
    ctx = _context()
    with pytest.raises(ValidationError):
        ctx.finish("oops", ctx)
    with pytest.raises(InvariantError):
        ctx.action_result


def test_finish_twice_is_an_invariant_error():
    ctx = _context()
    ctx.finish(ctx.success(), ctx)
    with pytest.raises(InvariantError):
        ctx.finish(ctx.success(), ctx)


# --- Parameter rebinding and effect aggregation ---


def test_with_params_keeps_identity_and_starts_empty():
    console = CapturingConsole()
    parent = _context(action_name="comment", ref="r1", params={"a": 1}, console=console)
    parent.record_effect("parent", [], DEST)

    child = parent.with_params({"b": 2})

    assert child is not parent
    assert child.action_name == "comment"
    assert child.feedback_name == "notify"
    assert child.ref == "r1"
    assert child.console is console
    assert child.params == {"b": 2}
    assert child.effects == []
    assert parent.params == {"a": 1}


def test_finish_merges_child_effects_after_direct_ones():
    parent = _context()
    parent.record_effect("direct-1", [], DEST)
    parent.record_effect("direct-2", [], DEST)
    child = parent.with_params({"x": 1})
    child.record_effect("child-1", [], DEST)

    parent.finish(parent.success(), child)

    assert [e.summary for e in parent.effects] == ["direct-1", "direct-2", "child-1"]


def test_finish_on_self_does_not_duplicate_effects():
    ctx = _context()
    ctx.record_effect("only", [], DEST)
    ctx.finish(ctx.success(), ctx)
    assert [e.summary for e in ctx.effects] == ["only"]


def test_merge_effects_from_self_is_an_invariant_error():
    ctx = _context()
    with pytest.raises(InvariantError):
        ctx.merge_effects(ctx)


def test_delegate_runs_body_on_child_and_merges():
    console = CapturingConsole()
    parent = _context(action_name="comment", params={"a": 1}, console=console)
    seen = {}

    def body(ctx):
        seen["params"] = dict(ctx.params)
        ctx.record_effect("child-1", [], DEST)
        return ctx.noop("delegated")

    parent.record_effect("direct-1", [], DEST)
    result = parent.delegate(body, {"b": 2})

    assert seen["params"] == {"b": 2}
    assert result == ActionResult.noop("delegated")
    assert [e.summary for e in parent.effects] == ["direct-1", "child-1"]
    assert console.lines() == ["Action 'comment' returned noop: delegated"]


def test_delegate_defaults_to_parent_params():
    parent = _context(params={"a": 1})
    seen = {}

    def body(ctx):
        seen.update(ctx.params)
        return ctx.success()

    parent.delegate(body)
    assert seen == {"a": 1}


def test_delegate_validates_child_result():
    parent = _context(action_name="comment")
    with pytest.raises(ValidationError, match="'comment'"):
        parent.delegate(lambda ctx: None)
    assert parent.effects == []


def test_effects_propagate_through_nested_delegation():
    def leaf(ctx):
        ctx.record_effect("leaf", [], DEST)
        return ctx.success()

    def middle(ctx):
        ctx.record_effect("middle", [], DEST)
        return ctx.delegate(leaf, {"depth": 2})

    def top(ctx):
        ctx.record_effect("top", [], DEST)
        return ctx.delegate(middle, {"depth": 1})

    feedback = Feedback(name="notify", actions=[Action(name="top", body=top)])
    run = feedback.run("refs/heads/main", CapturingConsole())

    assert [e.summary for e in run.effects] == ["top", "middle", "leaf"]


# --- Action and Feedback ---


def test_action_run_binds_params_and_merges_effects():
    seen = {}

    def body(ctx):
        seen.update(ctx.params)
        ctx.record_effect("labelled", [OriginRef("abc")], DEST)
        return ctx.success()

    action = Action(name="label", body=body, params={"label": "ready"})
    ctx = FeedbackContext(Feedback(name="notify"), action, "r1", CapturingConsole())
    action.run(ctx)

    assert seen == {"label": "ready"}
    assert ctx.action_result.is_success
    assert [e.summary for e in ctx.effects] == ["labelled"]


def test_feedback_run_collects_outcomes_in_order():
    def first(ctx):
        ctx.record_effect("first", [], DEST)
        return ctx.success()

    def second(ctx):
        return ctx.noop("nothing new")

    feedback = Feedback(
        name="notify",
        actions=[Action(name="first", body=first), Action(name="second", body=second)],
    )
    run = feedback.run("refs/heads/main", CapturingConsole())

    assert [o.action_name for o in run.outcomes] == ["first", "second"]
    assert run.status == RunStatus.SUCCESS
    assert [e.summary for e in run.effects] == ["first"]
    assert run.ref == "refs/heads/main"
    assert "1 success, 1 noop, 0 error, 1 effects" in run.summary()


def test_feedback_run_all_noop():
    feedback = Feedback(
        name="notify",
        actions=[Action(name="a", body=lambda ctx: ctx.noop()), Action(name="b", body=lambda ctx: ctx.noop())],
    )
    assert feedback.run(None, CapturingConsole()).status == RunStatus.NOOP


def test_feedback_run_stops_on_error():
    calls = []

    def failing(ctx):
        calls.append("failing")
        return ctx.error("cannot comment")

    def never(ctx):
        calls.append("never")
        return ctx.success()

    console = CapturingConsole()
    feedback = Feedback(
        name="notify",
        actions=[Action(name="failing", body=failing), Action(name="never", body=never)],
    )
    run = feedback.run(None, console)

    assert calls == ["failing"]
    assert run.status == RunStatus.ERROR
    assert len(run.outcomes) == 1
    assert console.lines(Severity.ERROR) == ["Action 'failing' returned error: cannot comment"]
    assert any("1 action(s) skipped" in line for line in console.lines(Severity.WARNING))


def test_feedback_run_propagates_validation_error():
    feedback = Feedback(name="notify", actions=[Action(name="broken", body=lambda ctx: "done")])
    with pytest.raises(ValidationError, match="'broken' returned: 'done'"):
        feedback.run(None, CapturingConsole())


def test_feedback_run_error_keeps_finished_outcomes():
    def first(ctx):
        ctx.record_effect("first", [], DEST)
        return ctx.success()

    feedback = Feedback(
        name="notify",
        actions=[
            Action(name="first", body=first),
            Action(name="broken", body=lambda ctx: None),
            Action(name="never", body=lambda ctx: ctx.success()),
        ],
    )
    with pytest.raises(FeedbackRunError, match="'broken' returned: None") as excinfo:
        feedback.run("refs/heads/main", CapturingConsole())

    run = excinfo.value.run
    assert [o.action_name for o in run.outcomes] == ["first"]
    assert [e.summary for e in run.effects] == ["first"]
    assert isinstance(excinfo.value.__cause__, ValidationError)


def test_feedback_actions_see_configured_endpoints():
    origin = NoopEndpoint()
    seen = {}

    def body(ctx):
        seen["origin"] = ctx.origin.describe()
        seen["destination"] = ctx.destination.describe()
        return ctx.success()

    feedback = Feedback(name="notify", actions=[Action(name="a", body=body)], origin=origin)
    feedback.run(None, CapturingConsole())
    assert seen == {"origin": {"type": "noop"}, "destination": {"type": "noop"}}
