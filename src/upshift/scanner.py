"""Scan a source tree for detection rule matches."""

import logging
from pathlib import Path

from upshift import version
from upshift.files import glob_files, read_text
from upshift.models import DetectionRule, MatchRecord
from upshift.rules.registry import RuleRegistry

logger = logging.getLogger(__name__)


class Scanner:
  """Tests every file matched by a rule's glob against its pattern.

  Rules run in registry order: built-ins first, then extensions in the
  order they were applied. Each (file, rule) pair yields at most one
  record, however often the pattern occurs.

  Example:
    scanner = Scanner(RuleRegistry.with_builtins())
    records = scanner.scan(Path("."), "7.0.0")
  """

  def __init__(self, registry: RuleRegistry):
    self._registry = registry

  def scan(self, root: Path | str, target_version: str | None) -> list[MatchRecord]:
    """Run every active detection rule against the tree under root."""
    root = Path(root)
    records: list[MatchRecord] = []
    contents: dict[str, str | None] = {}

    for rule in self._registry.detections:
      if not version.applies(target_version, rule.version_constraint):
        logger.debug(
          "Skipping %r: constraint %r excludes %s",
          rule.source, rule.version_constraint, target_version,
        )
        continue
      records.extend(self._scan_rule(rule, root, contents))

    return records

  def _scan_rule(
    self,
    rule: DetectionRule,
    root: Path,
    contents: dict[str, str | None],
  ) -> list[MatchRecord]:
    try:
      files = glob_files(root, rule.file_glob)
    except (OSError, ValueError) as e:
      logger.warning("Skipping rule %r: cannot expand %r: %s", rule.source, rule.file_glob, e)
      return []

    records: list[MatchRecord] = []
    for rel_path in files:
      content = self._read(root, rel_path, contents)
      if content is not None and rule.pattern.search(content):
        records.append(MatchRecord(
          file=rel_path,
          message=rule.message,
          pattern_source=rule.source,
        ))
    return records

  def _read(self, root: Path, rel_path: str, contents: dict[str, str | None]) -> str | None:
    """Read a file once per scan, None if it cannot be read as text."""
    if rel_path not in contents:
      try:
        contents[rel_path] = read_text(root / rel_path)
      except (OSError, UnicodeDecodeError) as e:
        logger.warning("Error scanning file %s: %s", rel_path, e)
        contents[rel_path] = None
    return contents[rel_path]
