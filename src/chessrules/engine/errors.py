from __future__ import annotations


class MalformedInputError(ValueError):
    """Raised for position or move text that cannot be parsed.

    Subclasses ``ValueError`` so callers catching the broader error keep
    working. Illegal (but well-formed) moves never raise; they resolve to
    ``None`` instead.
    """
