"""Version gate for rules that only apply to some target versions."""

import re

from upshift.models import Constraint

OPERATORS = ("==", ">=", ">", "<=", "<", "~>")

_VERSION = re.compile(r"^\d+(?:\.\d+)*$")
_CONSTRAINT = re.compile(r"^\s*(\S+)\s+(\S+)\s*$")

Version = tuple[int, int, int]


class InvalidVersionError(ValueError):
  """Version string is not dotted-numeric."""


def parse_version(version: str) -> Version:
  """Parse a dotted-numeric version into a (major, minor, patch) tuple.

  Missing components are zero, so "6.0" and "6.0.0" compare equal.
  Components past the patch level are ignored.
  """
  text = version.strip()
  if not _VERSION.match(text):
    raise InvalidVersionError(f"Invalid version: {version!r}")

  parts = [int(p) for p in text.split(".")][:3]
  while len(parts) < 3:
    parts.append(0)
  return parts[0], parts[1], parts[2]


def version_at_least(version: str | None, minimum: str) -> bool:
  """Check version >= minimum, False if version is missing or invalid."""
  return applies(version, (">=", minimum))


def major_minor(version: str) -> str:
  """Return the "major.minor" prefix of a version (e.g. "7.0")."""
  major, minor, _ = parse_version(version)
  return f"{major}.{minor}"


def parse_constraint(constraint: Constraint) -> tuple[str, Version] | None:
  """Split a constraint into (operator, version), or None if malformed."""
  if isinstance(constraint, tuple):
    if len(constraint) != 2:
      return None
    operator, version = constraint
  else:
    match = _CONSTRAINT.match(constraint)
    if not match:
      return None
    operator, version = match.groups()

  if operator not in OPERATORS:
    return None

  try:
    return operator, parse_version(version)
  except InvalidVersionError:
    return None


def applies(target_version: str | None, constraint: Constraint | None) -> bool:
  """Check whether a rule with this constraint is active for the target.

  A rule without a constraint always applies. Anything that cannot be
  evaluated (unknown operator, malformed text, missing or invalid target
  version) never applies.
  """
  if constraint is None:
    return True
  if target_version is None:
    return False

  parsed = parse_constraint(constraint)
  if parsed is None:
    return False
  operator, wanted = parsed

  try:
    current = parse_version(target_version)
  except InvalidVersionError:
    return False

  if operator == "==":
    return current == wanted
  if operator == ">=":
    return current >= wanted
  if operator == ">":
    return current > wanted
  if operator == "<=":
    return current <= wanted
  if operator == "<":
    return current < wanted
  # ~> : same major.minor line, at or above the given patch
  upper = (wanted[0], wanted[1] + 1, 0)
  return wanted <= current < upper
