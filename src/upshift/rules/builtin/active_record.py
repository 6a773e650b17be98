"""ActiveRecord, ActiveStorage and ActiveJob rules."""

import re

from upshift.rules.builtin.base import detection, substitution
from upshift.rules.builtin.deprecations import dynamic_finder

DYNAMIC_FINDER = r"\.find_by_(?!sql\b)[a-zA-Z_]+\b"
SCOPED = r"\.scoped\b(?![?!])"
DEFAULT_SCOPE_WHERE = r"default_scope\s+[^{]*\bwhere\b"
UPDATE_ALL_TIMESTAMPS = r"\.update_all\([^)]*created_at|\.update_all\([^)]*updated_at"
STRING_WHERE = r"""\.where\(["'](\w+)\s*=\s*["']"""
ATTACHMENTS = r"has_one_attached|has_many_attached"
BLOB_ANALYZABLE = r"include\s+ActiveStorage::Blob::Analyzable"
DESERIALIZATION_ERROR = r"rescue_from\s+ActiveJob::DeserializationError"
PERFORM_LATER = r"\.perform_later\b(?!.*wait)"


def hash_condition(match: re.Match[str]) -> str:
  """Turn ``.where("name = 'Bob'")`` into ``.where(name: 'Bob')``."""
  return f".where({match.group('column')}: {match.group('quote')}{match.group('value')}{match.group('quote')})"


DETECTIONS = [
  detection(
    DYNAMIC_FINDER,
    "Dynamic finders (find_by_*) are deprecated - use 'find_by(column: value)' instead",
  ),
  detection(
    SCOPED,
    "Deprecated 'scoped' method - use 'all' instead",
  ),
  detection(
    DEFAULT_SCOPE_WHERE,
    "default_scope with where conditions can cause issues - consider refactoring",
  ),
  detection(
    UPDATE_ALL_TIMESTAMPS,
    "update_all bypasses callbacks and validations - ensure this is intended",
    version_constraint=">= 6.0.0",
  ),
  detection(
    STRING_WHERE,
    "String conditions in where() are deprecated - use hash conditions instead",
    version_constraint=">= 7.0.0",
  ),
  detection(
    ATTACHMENTS,
    "ActiveStorage attachment - ensure dependent: :purge_later is set for proper cleanup",
  ),
  detection(
    BLOB_ANALYZABLE,
    "ActiveStorage::Blob::Analyzable is internal to ActiveStorage - "
    "remove the explicit include",
    version_constraint=">= 6.0.0",
  ),
  detection(
    DESERIALIZATION_ERROR,
    "Consider handling ActiveJob::DeserializationError for better error handling",
  ),
  detection(
    PERFORM_LATER,
    "Consider using wait options with perform_later for better job scheduling",
    version_constraint=">= 6.0.0",
  ),
]

SUBSTITUTIONS = {
  DYNAMIC_FINDER: substitution(
    r"\.find_by_(?!sql\b)([a-zA-Z_]+)\(([^()]*)\)",
    dynamic_finder("find_by"),
  ),
  SCOPED: substitution(SCOPED, ".all"),
  STRING_WHERE: substitution(
    r"""\.where\((?P<outer>["'])(?P<column>\w+)\s*=\s*(?P<quote>["'])"""
    r"""(?P<value>[^"'\n]*)(?P=quote)(?P=outer)\)""",
    hash_condition,
  ),
}
