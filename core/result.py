"""Success/failure values returned by the use cases instead of raising."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar('T')
E = TypeVar('E', bound=BaseException)


@dataclass(frozen=True)
class Success(Generic[T]):
    """Outcome of a call that returned normally."""
    value: T

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure(Generic[E]):
    """Outcome of a call that raised; the exception is kept in ``error``."""
    error: E

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    def unwrap(self):
        raise self.error


Result = Union[Success[T], Failure[E]]
