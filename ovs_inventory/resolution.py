"""
Fallback resolution and alternate-key correlation helpers.

A field is resolved by walking an ordered list of strategies. Each strategy
either returns a value, returns None/"" to pass, or raises. Strategies are
evaluated lazily: later ones only run when earlier ones come up empty.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Generic, Hashable, Iterable, List, Optional, Sequence, Tuple, TypeVar

import structlog

from .exceptions import IdentityUnavailable, InventoryError

logger = structlog.get_logger(__name__)

UNKNOWN = "unknown"

T = TypeVar("T")


@dataclass(frozen=True)
class Strategy:
    source: str
    fetch: Callable[[], Optional[str]]


class Unresolved(InventoryError):
    """Every strategy for a required field came up empty."""

    code = "unresolved"

    def __init__(self, name: str, causes: Sequence[Tuple[str, BaseException]]) -> None:
        detail = " and ".join(f"{source} ({cause})" for source, cause in causes)
        super().__init__(f"failed to get {name} from {detail}" if detail else f"failed to get {name}")
        self.name = name
        self.causes = list(causes)


def resolve_field(
    name: str,
    strategies: Iterable[Strategy],
    *,
    required: bool = False,
    default: str = UNKNOWN,
) -> str:
    """
    Return the first non-empty value produced by `strategies`.

    When all strategies are exhausted a required field raises `Unresolved`
    carrying every underlying cause; an optional one returns `default`.
    """
    causes: List[Tuple[str, BaseException]] = []
    for strategy in strategies:
        try:
            value = strategy.fetch()
        except Exception as e:
            causes.append((strategy.source, e))
            logger.debug("field_source_failed", field=name, source=strategy.source, error=str(e))
            continue
        if value:
            logger.debug("field_resolved", field=name, source=strategy.source)
            return value
        causes.append((strategy.source, LookupError(f"no '{name}' found")))

    if required:
        raise Unresolved(name, causes)
    logger.debug("field_defaulted", field=name, default=default)
    return default


def identity_unavailable(error: Unresolved) -> IdentityUnavailable:
    return IdentityUnavailable(error.message, causes=[cause for _, cause in error.causes])


@dataclass
class AlternateKeyIndex(Generic[T]):
    """
    Lookup table where each record is reachable under several keys.

    Records are added with all of their candidate keys; `resolve` tries the
    caller's keys in preference order and returns the first hit.
    """

    _entries: Dict[Hashable, T] = field(default_factory=dict)

    def add(self, record: T, *keys: Hashable) -> None:
        for key in keys:
            # Empty keys never match anything.
            if key:
                self._entries[key] = record

    def resolve(self, *keys: Hashable) -> Optional[T]:
        for key in keys:
            if key and key in self._entries:
                return self._entries[key]
        return None

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries
