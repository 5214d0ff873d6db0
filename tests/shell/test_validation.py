from __future__ import annotations

import pytest

from quiz_shell.shell.errors import MissingParameterError, NotANumberError
from quiz_shell.shell.validation import answers_match, validate_id


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("1", 1),
        ("42", 42),
        ("  7", 7),
        ("12abc", 12),
        ("1.9", 1),
        ("-3", -3),
        ("+4", 4),
        ("007", 7),
    ],
)
def test_validate_id_reads_leading_integer(raw, expected):
    assert validate_id(raw) == expected


def test_validate_id_missing_parameter():
    with pytest.raises(MissingParameterError) as excinfo:
        validate_id(None)

    assert str(excinfo.value) == "Missing parameter <id>."


@pytest.mark.parametrize("raw", ["", "abc", "x12", " - 3", "+"])
def test_validate_id_rejects_non_numbers(raw):
    with pytest.raises(NotANumberError) as excinfo:
        validate_id(raw)

    assert excinfo.value.raw == raw
    assert "not a number" in str(excinfo.value)


def test_answers_match_ignores_case_and_whitespace():
    assert answers_match("  rome ", "Rome")
    assert answers_match("PARIS", "paris")
    assert not answers_match("Milan", "Rome")
    assert not answers_match("", "Rome")


def test_answers_match_lowercases_without_folding():
    assert answers_match("STRASSE", "strasse")
    assert not answers_match("ss", "ß")
    assert not answers_match("strasse", "straße")
