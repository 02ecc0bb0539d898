"""
Custom exception hierarchy for lenient-coerce.

Parse failures never raise: unparseable input collapses to ``None`` or the
kind's zero value.  The exceptions below are reserved for programming and
configuration mistakes, which should fail loudly:

- A kind descriptor that cannot be classified (e.g. ``Union[int, str]``).
- Re-registering a parser for a kind that already has a different one.
- A malformed YAML config or an unknown kind name inside it.
"""


class LenientCoerceError(Exception):
    """Base exception for all lenient-coerce errors."""


class UnsupportedKindError(LenientCoerceError, TypeError):
    """Raised when a kind descriptor is neither a type nor ``Optional[type]``.

    For example ``Union[int, str]`` or ``list[int]`` -- composite targets
    are not coerced.
    """


class ParserAlreadyRegisteredError(LenientCoerceError):
    """Raised when registering a parser for a kind that already has one.

    Registry entries are immutable after the first write.
    """


class ConfigValidationError(LenientCoerceError):
    """Raised when a coercion config file is empty or fails validation."""


class UnknownKindNameError(LenientCoerceError, ValueError):
    """Raised when a kind name (e.g. in a config ``columns`` map) is unknown."""
