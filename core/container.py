"""Plugin container holding plain values and lazily evaluated services.

Every callable stored in the container is considered a service. Services are
evaluated either in bulk by :meth:`Container.run` or on first access, and the
result replaces the callable so each service runs at most once.

Deferred services skip :meth:`Container.run` and are only evaluated when
accessed. They are registered explicitly with
:meth:`Container.register_deferred` or, as sugar, by prefixing the key with
the marker character::

    plugin = Container()
    plugin["version"] = "1.0.0"
    plugin["admin_side"] = load_admin
    plugin["*mailer"] = load_mailer   # deferred, stored as "mailer"
    plugin.run()                      # load_admin runs, load_mailer does not
    plugin["mailer"]                  # load_mailer runs now
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Iterator, List, Optional, Union

from loguru import logger

from core.error_handler import timed
from core.exceptions import InvalidArgumentError

DEFERRED_MARKER = "*"


@dataclass(frozen=True)
class Raw:
    """An evaluated entry."""
    value: Any


@dataclass(frozen=True)
class Pending:
    """A service waiting to be evaluated.

    Attributes:
        factory: Zero-argument callable producing the service
        deferred: Whether ``run()`` leaves this entry alone
    """
    factory: Callable[[], Any]
    deferred: bool = False


Entry = Union[Raw, Pending]


class Container:
    """Key-value store with eager and deferred service evaluation."""

    def __init__(self, marker: str = DEFERRED_MARKER):
        if not isinstance(marker, str) or len(marker) != 1:
            raise InvalidArgumentError(f"Deferred marker must be a single character, got {marker!r}")
        self.marker = marker
        self._entries: Dict[Hashable, Entry] = {}
        # Generated keys never reuse an index, even after deletion
        self._next_index = 0

    # ---------- Registration ----------
    def set(self, key: Optional[Hashable], value: Any) -> None:
        """Store a value or service under ``key``.

        A ``None`` key appends the value under the next integer index. A key
        starting with the marker and a callable value registers a deferred
        service under the key without its marker.
        """
        if key is None:
            self.append(value)
            return

        if self.is_deferrable(key, value):
            self.register_deferred(self.strip_marker(key), value)
            return

        self._store(key, value)
        logger.trace("Registered {!r} ({})", key, "service" if callable(value) else "value")

    def append(self, value: Any) -> int:
        """Store ``value`` under a generated integer key and return that key."""
        key = self._next_index
        self._store(key, value)
        return key

    def register_deferred(self, key: Hashable, value: Callable[[], Any]) -> None:
        """Register a service that ``run()`` will not evaluate.

        Raises:
            InvalidArgumentError: If ``value`` is not callable
        """
        if not callable(value):
            raise InvalidArgumentError(f"Deferred service {key!r} is not callable: {value!r}")
        self._put(key, Pending(value, deferred=True))
        logger.trace("Registered deferred service {!r}", key)

    def is_deferrable(self, key: Any, value: Any) -> bool:
        """Check whether a keyed write should register a deferred service."""
        return isinstance(key, str) and key[:1] == self.marker and callable(value)

    @staticmethod
    def strip_marker(key: str) -> str:
        """Drop the leading marker character from ``key``."""
        return key[1:]

    # ---------- Evaluation ----------
    @timed(level="DEBUG")
    def run(self) -> None:
        """Evaluate every pending, non-deferred service.

        Failures raised by a service propagate to the caller. Services
        evaluated before the failure keep their results and the failing one
        stays pending.
        """
        evaluated = 0
        for key in list(self._entries):
            entry = self._entries.get(key)
            if isinstance(entry, Pending) and not entry.deferred:
                self._evaluate(key, entry)
                evaluated += 1
        logger.debug("Container run evaluated {} service(s)", evaluated)

    def get(self, key: Hashable, default: Any = None) -> Any:
        """Return the value under ``key``, evaluating it first if it is a service."""
        entry = self._entries.get(key)
        if entry is None:
            return default
        if isinstance(entry, Pending):
            return self._evaluate(key, entry)
        return entry.value

    def _evaluate(self, key: Hashable, entry: Pending) -> Any:
        result = entry.factory()
        # Only successful evaluations are cached, and only if the service
        # did not delete or replace its own entry while running
        if self._entries.get(key) is entry:
            self._entries[key] = Raw(result)
        logger.debug("Service {!r} evaluated", key)
        return result

    # ---------- Inspection ----------
    def has(self, key: Hashable) -> bool:
        """Check if ``key`` is registered, evaluated or not."""
        return key in self._entries

    def is_resolved(self, key: Hashable) -> bool:
        """Check if ``key`` is registered and already holds a plain value."""
        return isinstance(self._entries.get(key), Raw)

    def keys(self) -> List[Hashable]:
        return list(self._entries)

    def delete(self, key: Hashable) -> None:
        """Remove ``key``. Missing keys are ignored."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Remove every entry (useful for testing)."""
        self._entries.clear()
        self._next_index = 0

    def _store(self, key: Hashable, value: Any) -> None:
        self._put(key, Pending(value) if callable(value) else Raw(value))

    def _put(self, key: Hashable, entry: Entry) -> None:
        self._entries[key] = entry
        # bool keys count too: True and 1 are the same dict key
        if isinstance(key, int) and key >= self._next_index:
            self._next_index = key + 1

    # ---------- Indexed access ----------
    def __getitem__(self, key: Hashable) -> Any:
        return self.get(key)

    def __setitem__(self, key: Optional[Hashable], value: Any) -> None:
        self.set(key, value)

    def __delitem__(self, key: Hashable) -> None:
        self.delete(key)

    def __contains__(self, key: object) -> bool:
        return self.has(key)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        resolved = sum(1 for entry in self._entries.values() if isinstance(entry, Raw))
        return f"Container(entries={len(self._entries)}, resolved={resolved})"
