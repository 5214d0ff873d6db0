"""Input validation for command parameters."""

from __future__ import annotations

import re

from .errors import MissingParameterError, NotANumberError

__all__ = ["validate_id", "answers_match"]

# Leading whitespace, optional sign, then the first run of decimal digits.
_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")


def validate_id(raw: str | None) -> int:
    """Return the quiz id encoded at the start of ``raw``.

    Parsing mirrors a lenient ``parseInt(raw, 10)``: leading whitespace is
    skipped and anything after the first run of digits is ignored, so
    ``"12abc"`` yields ``12``. Existence is left to the store.

    Raises:
        MissingParameterError: ``raw`` is ``None``.
        NotANumberError: ``raw`` does not start with a number.
    """

    if raw is None:
        raise MissingParameterError("id")
    match = _LEADING_INT.match(raw)
    if match is None:
        raise NotANumberError(raw)
    return int(match.group(1))


def answers_match(given: str, expected: str) -> bool:
    """Compare answers ignoring case and surrounding whitespace."""

    return given.strip().lower() == expected.strip().lower()
