"""
Parser registry for lenient-coerce.

Maps a value kind to the parsing function used for it, or to ``None`` when
the kind has no parsing function.  Entries are discovered lazily on the
first ``resolve()`` for a kind and never change afterwards.

Discovery order for an unseen kind:
1. Enums bind to ``builtins.enum_parser`` (no introspection).
2. Builtin scalar kinds bind to ``builtins.BUILTIN_PARSERS``.
3. numpy scalar kinds bind to ``builtins.numpy_parser``.
4. Otherwise the kind's *own* declared members (``vars(kind)``, inherited
   members are ignored) are searched for a ``staticmethod`` or
   ``classmethod`` named ``try_parse`` taking exactly one positional
   argument (annotated ``str`` or unannotated).  It must return a
   ``(success, value)`` pair.

Thread-safety:
  Lookups are plain dict reads.  Discovery runs without any lock, so slow
  introspection of one kind never blocks another.  The result is then
  published with ``dict.setdefault`` under a lock held only for that call:
  if two threads race on the same unseen kind both may introspect, but
  both return the single entry that was published first.

Example::

    registry = ParserRegistry()
    parse = registry.resolve(int)
    parse("42")        # (True, 42)
    parse("forty-two") # (False, None)
"""

from __future__ import annotations

import enum
import logging
import threading
from typing import Any

from lenient_coerce.builtins import (
    BUILTIN_PARSERS,
    PARSE_ERRORS,
    ParseFunc,
    enum_parser,
    numpy_parser,
)
from lenient_coerce.exceptions import ParserAlreadyRegisteredError
from lenient_coerce.kinds import PARSE_MEMBER, is_numpy_scalar, parse_member

logger = logging.getLogger(__name__)

_MISSING = object()

def _bind_try_parse(kind: type, member: Any) -> ParseFunc:
    """Wrap a discovered ``try_parse`` so it honours the parsing-function contract."""
    bound = member.__get__(None, kind)

    def parse(text: str) -> tuple[bool, Any]:
        try:
            ok, value = bound(text)
        except PARSE_ERRORS:
            return False, None
        return (True, value) if ok else (False, None)

    parse.__name__ = f"{kind.__name__}.{PARSE_MEMBER}"
    parse.__qualname__ = parse.__name__
    return parse


def find_try_parse(kind: type) -> ParseFunc | None:
    """Look for a parse-shaped ``try_parse`` declared directly on *kind*.

    Returns:
        A parsing function, or ``None`` if the kind declares no suitable member.
    """
    member = parse_member(kind)
    if member is None:
        return None
    return _bind_try_parse(kind, member)


class ParserRegistry:
    """Lazily-populated, thread-safe cache of parsing functions per kind.

    Construct one at the application's composition root and hand it to every
    ``TypeCoercer`` that should share it.
    """

    def __init__(self) -> None:
        self._entries: dict[type, ParseFunc | None] = {}
        self._publish_lock = threading.Lock()

    def __contains__(self, kind: object) -> bool:
        return kind in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def kinds(self) -> tuple[type, ...]:
        """Kinds resolved or registered so far."""
        return tuple(self._entries)

    def resolve(self, kind: type) -> ParseFunc | None:
        """Return the parsing function for *kind*, discovering it on first use.

        Returns:
            The parsing function, or ``None`` if *kind* has none.  A ``None``
            result is cached just like a found function.
        """
        entry = self._entries.get(kind, _MISSING)
        if entry is not _MISSING:
            return entry

        discovered = self._discover(kind)
        with self._publish_lock:
            entry = self._entries.setdefault(kind, discovered)
        logger.debug(
            "Resolved parser for %s: %s",
            getattr(kind, "__qualname__", kind),
            "none" if entry is None else getattr(entry, "__name__", entry),
        )
        return entry

    def register(self, kind: type, func: ParseFunc) -> None:
        """Register *func* as the parsing function for *kind*.

        Registering the same function twice is a no-op.

        Raises:
            ParserAlreadyRegisteredError: If *kind* already has a different entry
                (including a cached "no parser" result).
        """
        with self._publish_lock:
            current = self._entries.setdefault(kind, func)
        if current is not func:
            raise ParserAlreadyRegisteredError(
                f"A parser for {getattr(kind, '__qualname__', kind)} is already "
                "registered; registry entries cannot be replaced"
            )
        logger.debug("Registered parser for %s", getattr(kind, "__qualname__", kind))

    def _discover(self, kind: type) -> ParseFunc | None:
        if issubclass(kind, enum.Enum):
            return enum_parser(kind)
        builtin = BUILTIN_PARSERS.get(kind)
        if builtin is not None:
            return builtin
        if is_numpy_scalar(kind):
            return numpy_parser(kind)
        return find_try_parse(kind)
