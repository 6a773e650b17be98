"""Migration class versioning for the target Rails version."""

import logging
import re
from pathlib import Path

from upshift import version
from upshift.files import glob_files, rewrite_file

logger = logging.getLogger(__name__)

MIGRATIONS = "db/migrate/*.rb"

_UNVERSIONED = re.compile(r"class\s+(\w+)\s+<\s+ActiveRecord::Migration\b(?!\[)")
_VERSIONED = re.compile(r"class\s+(\w+)\s+<\s+ActiveRecord::Migration\[(\d+\.\d+)\]")
_TIMESTAMPS = re.compile(r"t\.timestamps\b(?![ \t]*\()(?![^\n]*precision:)([^\n]*)")
_REFERENCES = re.compile(
  r"t\.(references|belongs_to)\s+:(\w+)(?![^\n]*(?:foreign_key|polymorphic))"
)
_JSON_COLUMN = re.compile(r"t\.json\s+:(\w+)(?=[ \t]*$|\s*,)", re.MULTILINE)


def update_migration_content(content: str, target_version: str) -> str:
  """Version a migration's superclass and modernize its column helpers."""
  target = version.major_minor(target_version)

  match = _VERSIONED.search(content)
  if match:
    current = match.group(2)
    content = _VERSIONED.sub(
      lambda m: f"class {m.group(1)} < ActiveRecord::Migration[{target}]",
      content,
    )
  elif _UNVERSIONED.search(content):
    current = None
    content = _UNVERSIONED.sub(
      lambda m: f"class {m.group(1)} < ActiveRecord::Migration[{target}]",
      content,
    )
  else:
    return content

  return _modernize_columns(content, current)


def _timestamps_with_precision(match: re.Match[str]) -> str:
  rest = match.group(1).strip()
  if not rest:
    return "t.timestamps precision: 6"
  if rest.startswith("#"):
    return f"t.timestamps precision: 6 {rest}"
  return f"t.timestamps precision: 6, {rest}"


def _modernize_columns(content: str, current: str | None) -> str:
  if current is None or not version.version_at_least(current, "5.2.0"):
    content = _TIMESTAMPS.sub(_timestamps_with_precision, content)

  content = _REFERENCES.sub(r"t.\1 :\2, foreign_key: true", content)
  return _JSON_COLUMN.sub(r"t.jsonb :\1, default: {}", content)


def update_migrations(root: Path, target_version: str) -> list[str]:
  """Update every migration under db/migrate.

  Returns:
    Relative paths of the migrations that changed.
  """
  if not version.version_at_least(target_version, "5.0.0"):
    return []

  changed: list[str] = []
  for rel_path in glob_files(root, MIGRATIONS):
    if rewrite_file(root / rel_path, lambda c: update_migration_content(c, target_version), root):
      logger.debug("Updated migration %s", rel_path)
      changed.append(rel_path)

  if changed:
    logger.info("Updated %d migration(s) to Rails %s", len(changed), version.major_minor(target_version))
  return changed
