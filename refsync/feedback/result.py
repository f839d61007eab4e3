"""Action results — how a feedback action reports its outcome."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from refsync.exceptions import check_condition


class ResultKind(Enum):
    SUCCESS = "success"
    NO_OP = "noop"
    ERROR = "error"


@dataclass(frozen=True)
class ActionResult:
    """Terminal outcome of one feedback action.

    Build instances through :meth:`success`, :meth:`noop` and :meth:`error`.
    An error result always carries a message.
    """

    kind: ResultKind
    message: str | None = None

    def __post_init__(self) -> None:
        if self.kind == ResultKind.ERROR:
            check_condition(bool(self.message), "An error result requires a message")

    @classmethod
    def success(cls) -> "ActionResult":
        return cls(ResultKind.SUCCESS)

    @classmethod
    def noop(cls, message: str | None = None) -> "ActionResult":
        return cls(ResultKind.NO_OP, message)

    @classmethod
    def error(cls, message: str) -> "ActionResult":
        return cls(ResultKind.ERROR, message)

    @property
    def is_success(self) -> bool:
        return self.kind == ResultKind.SUCCESS

    @property
    def is_noop(self) -> bool:
        return self.kind == ResultKind.NO_OP

    @property
    def is_error(self) -> bool:
        return self.kind == ResultKind.ERROR

    def __str__(self) -> str:
        if self.message is None:
            return self.kind.value
        return f"{self.kind.value}: {self.message}"
