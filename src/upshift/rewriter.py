"""Apply rewrites for match records."""

import logging
from pathlib import Path
from typing import Sequence

from upshift.files import is_protected, read_text, write_text
from upshift.models import MatchRecord, RewriteRule, UpgradeOptions, UpgradeResult
from upshift.rules.builtin import find_substitution, is_unsafe_source
from upshift.rules.registry import RuleRegistry
from upshift.transforms import apply_transforms

logger = logging.getLogger(__name__)


def apply_rewrite(rule: RewriteRule, content: str) -> str:
  """Replace every occurrence of a rewrite rule's pattern."""
  replacement = rule.replacement
  if callable(replacement):
    return rule.pattern.sub(lambda m: replacement(m.group(0)), content)
  return rule.pattern.sub(replacement, content)


class Rewriter:
  """Rewrites files for the records produced by a scan.

  Records are grouped by file. Each file is read once, every record's
  rewrite is applied in order, and the file is written back only if its
  content changed. Records sharing a pattern source within a file
  collapse into a single rewrite.

  Lookup order for a record's rewrite:
    1. A rewrite registered in the registry (extensions, callers).
    2. The built-in substitution for that pattern source.
  Records with neither stay unresolved.
  """

  def __init__(self, registry: RuleRegistry, options: UpgradeOptions | None = None):
    self._registry = registry
    self._options = options or UpgradeOptions()
    self._log_level = logging.INFO if self._options.verbose else logging.DEBUG

  def rewrite(self, root: Path | str, records: Sequence[MatchRecord]) -> UpgradeResult:
    """Rewrite files under root for the given records.

    Raises:
      FileWriteError: A changed file could not be persisted.
    """
    records = list(records)
    if self._options.dry_run:
      return UpgradeResult(records=records, changed_files=[], unresolved=records)

    root = Path(root)
    changed: list[str] = []
    resolved: set[tuple[str, str]] = set()

    for rel_path, file_records in self._group_by_file(records).items():
      fixed = self._rewrite_file(root, rel_path, file_records)
      if fixed:
        changed.append(rel_path)
        resolved.update((rel_path, source) for source in fixed)

    for rel_path in apply_transforms(root, self._options):
      if rel_path not in changed:
        changed.append(rel_path)

    unresolved = [r for r in records if (r.file, r.pattern_source) not in resolved]
    return UpgradeResult(records=records, changed_files=changed, unresolved=unresolved)

  def _group_by_file(self, records: list[MatchRecord]) -> dict[str, list[MatchRecord]]:
    by_file: dict[str, list[MatchRecord]] = {}
    for record in records:
      by_file.setdefault(record.file, []).append(record)
    return by_file

  def _rewrite_file(
    self,
    root: Path,
    rel_path: str,
    records: list[MatchRecord],
  ) -> set[str]:
    """Apply all records for one file.

    Returns:
      Pattern sources whose rewrite changed the file; empty if the
      file was not written.
    """
    if is_protected(rel_path):
      logger.debug("Skipping protected file %s", rel_path)
      return set()

    path = root / rel_path
    if not path.is_file():
      logger.debug("Skipping %s: no longer exists", rel_path)
      return set()

    try:
      original = read_text(path)
    except (OSError, UnicodeDecodeError) as e:
      logger.warning("Error reading file %s: %s", rel_path, e)
      return set()
    content = original
    handled: set[str] = set()
    fixed: set[str] = set()

    for record in records:
      source = record.pattern_source
      if source in handled:
        continue
      handled.add(source)

      if self._skip_unsafe(source):
        logger.debug("Safe mode: leaving %r in %s for manual review", source, rel_path)
        continue

      updated = self._fix(source, content)
      if updated is not None and updated != content:
        content = updated
        fixed.add(source)
        logger.log(self._log_level, "Fixed issue in %s: %s", rel_path, record.message)

    if content == original:
      return set()

    write_text(path, content, root)
    return fixed

  def _skip_unsafe(self, source: str) -> bool:
    if not self._options.safe_mode:
      return False
    custom = self._registry.find_rewrite(source)
    if custom is not None:
      return not custom.safe
    return is_unsafe_source(source)

  def _fix(self, source: str, content: str) -> str | None:
    """Rewrite content for one pattern source, None if no rewrite is known."""
    custom = self._registry.find_rewrite(source)
    if custom is not None:
      return apply_rewrite(custom, content)

    builtin = find_substitution(source)
    if builtin is not None:
      return builtin.apply(content)

    return None
