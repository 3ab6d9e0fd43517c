"""
Tagged results for the solver layer.

Expected failures (unreachable target, vertical launch, unbracketed root)
are returned as ``Err`` values rather than raised.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

T = TypeVar('T')


class Failure(Enum):
    UNREACHABLE = 'unreachable'
    DEGENERATE_ANGLE = 'degenerate_angle'
    NO_ROOT_BRACKETED = 'no_root_bracketed'


class SolverError(ValueError):
    """Raised by ``unwrap()`` on an ``Err``."""

    def __init__(self, reason: Failure, detail: str = ''):
        self.reason = reason
        self.detail = detail
        msg = reason.value if not detail else f"{reason.value}: {detail}"
        super().__init__(msg)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    reason: Failure
    detail: str = ''

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self):
        raise SolverError(self.reason, self.detail)


Result = Union[Ok[T], Err]
