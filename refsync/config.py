"""Feedback configuration — load feedback migrations from YAML.

A configuration file declares one feedback migration and its actions. Action
bodies are ordinary Python callables referenced by import path::

    feedback:
      name: notify-review
      description: Comment on the review once the change lands
      actions:
        - name: comment
          callable: my_pkg.actions:comment
          params:
            label: ready

Endpoints are not part of the file; callers pass them in.
"""

from __future__ import annotations

import importlib
from pathlib import Path
from typing import Any

import yaml

from refsync.endpoints import Endpoint, NoopEndpoint
from refsync.exceptions import ConfigError
from refsync.feedback.action import Action, Feedback
from refsync.feedback.context import ActionBody


def load_feedback(
    path: str | Path,
    origin: Endpoint | None = None,
    destination: Endpoint | None = None,
) -> Feedback:
    """Load a feedback migration from a YAML file.

    Raises:
        ConfigError: If the file cannot be read or parsed, or declares an
            invalid feedback.
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read feedback config {path}: {e}")

    return parse_feedback(data, origin=origin, destination=destination)


def parse_feedback(
    data: Any,
    origin: Endpoint | None = None,
    destination: Endpoint | None = None,
) -> Feedback:
    """Build a :class:`Feedback` from already-parsed configuration data."""
    if not isinstance(data, dict) or not isinstance(data.get("feedback"), dict):
        raise ConfigError("Config must contain a 'feedback' mapping")
    section = data["feedback"]

    name = section.get("name")
    if not name:
        raise ConfigError("Feedback is missing a 'name'")

    raw_actions = section.get("actions") or []
    if not isinstance(raw_actions, list) or not raw_actions:
        raise ConfigError(f"Feedback '{name}' must declare a non-empty 'actions' list")

    actions = []
    seen = set()
    for i, action_data in enumerate(raw_actions):
        action = _parse_action(name, i, action_data)
        if action.name in seen:
            raise ConfigError(f"Feedback '{name}' declares action '{action.name}' twice")
        seen.add(action.name)
        actions.append(action)

    return Feedback(
        name=name,
        actions=actions,
        origin=origin or NoopEndpoint(),
        destination=destination or NoopEndpoint(),
        description=section.get("description") or "",
    )


def _parse_action(feedback_name: str, index: int, data: Any) -> Action:
    if not isinstance(data, dict):
        raise ConfigError(f"Feedback '{feedback_name}': action #{index + 1} must be a mapping")

    target = str(data.get("callable") or "")
    name = data.get("name") or target.rpartition(":")[2]
    if not target or not name:
        raise ConfigError(
            f"Feedback '{feedback_name}': action #{index + 1} needs a 'callable' import path"
        )

    params = data.get("params") or {}
    if not isinstance(params, dict):
        raise ConfigError(f"Feedback '{feedback_name}': params of '{name}' must be a mapping")

    return Action(name=name, body=resolve_callable(target), params=params)


def resolve_callable(target: str) -> ActionBody:
    """Import ``module:attribute`` and return the callable it names."""
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise ConfigError(f"Invalid callable '{target}', expected 'module:function'")

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"Cannot import module '{module_name}': {e}")

    for attr in attr_path.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError:
            raise ConfigError(f"'{target}' not found: no attribute '{attr}'")

    if not callable(obj):
        raise ConfigError(f"'{target}' is not callable")
    return obj
