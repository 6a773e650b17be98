"""Tests for the version gate."""

import pytest
from upshift.version import (
  InvalidVersionError,
  applies,
  major_minor,
  parse_constraint,
  parse_version,
  version_at_least,
)


class TestParseVersion:
  def test_full_version(self) -> None:
    assert parse_version("6.1.4") == (6, 1, 4)

  def test_missing_components_are_zero(self) -> None:
    assert parse_version("6.0") == parse_version("6.0.0")
    assert parse_version("7") == (7, 0, 0)

  def test_extra_components_ignored(self) -> None:
    assert parse_version("6.1.4.1") == (6, 1, 4)

  def test_invalid_version_raises(self) -> None:
    with pytest.raises(InvalidVersionError):
      parse_version("six")
    with pytest.raises(InvalidVersionError):
      parse_version("6.x")

  def test_major_minor(self) -> None:
    assert major_minor("7.0.4") == "7.0"
    assert major_minor("6") == "6.0"


class TestParseConstraint:
  def test_text_constraint(self) -> None:
    assert parse_constraint(">= 6.0.0") == (">=", (6, 0, 0))

  def test_tuple_constraint(self) -> None:
    assert parse_constraint(("~>", "6.0")) == ("~>", (6, 0, 0))

  def test_malformed_constraint(self) -> None:
    assert parse_constraint(">=6.0.0") is None
    assert parse_constraint("") is None

  def test_unknown_operator(self) -> None:
    assert parse_constraint("=> 6.0.0") is None


class TestApplies:
  def test_no_constraint_always_applies(self) -> None:
    assert applies(None, None)
    assert applies("5.2.0", None)

  def test_missing_target_never_applies(self) -> None:
    assert not applies(None, ">= 5.0.0")

  @pytest.mark.parametrize(
    ("operator", "target", "expected"),
    [
      ("==", "6.0", True),
      ("==", "6.0.1", False),
      (">=", "6.0.0", True),
      (">=", "5.9.9", False),
      (">", "6.0.0", False),
      (">", "6.0.1", True),
      ("<=", "6.0.0", True),
      ("<=", "6.0.1", False),
      ("<", "5.2.8", True),
      ("<", "6.0.0", False),
    ],
  )
  def test_comparison_operators(self, operator: str, target: str, expected: bool) -> None:
    assert applies(target, f"{operator} 6.0.0") is expected

  def test_pessimistic_operator(self) -> None:
    assert applies("6.0.0", "~> 6.0.0")
    assert applies("6.0.9", "~> 6.0.0")
    assert not applies("6.1.0", "~> 6.0.0")
    assert not applies("5.9.9", "~> 6.0.0")

  def test_malformed_constraint_never_applies(self) -> None:
    assert not applies("7.0.0", "at least 6")
    assert not applies("7.0.0", "!= 6.0.0")
    assert not applies("7.0.0", ">= six")

  def test_invalid_target_never_applies(self) -> None:
    assert not applies("edge", ">= 6.0.0")

  def test_version_at_least(self) -> None:
    assert version_at_least("7.0.0", "6.0.0")
    assert not version_at_least("5.2.0", "6.0.0")
    assert not version_at_least(None, "5.0.0")
