"""Core domain models for scanning and rewriting."""

import re
from dataclasses import dataclass, field
from typing import Callable, Sequence

Replacement = str | Callable[[str], str]
Constraint = str | tuple[str, str]


@dataclass(frozen=True)
class DetectionRule:
  """A pattern reported wherever it matches, never rewritten by itself."""

  pattern: re.Pattern[str]
  message: str
  file_glob: str
  version_constraint: Constraint | None = None

  @property
  def source(self) -> str:
    return self.pattern.pattern


@dataclass(frozen=True)
class RewriteRule:
  """A replacement for every occurrence of a pattern.

  The replacement is either a template using numbered back-references
  (``\\1``) or a function called with each matched span.
  """

  pattern: re.Pattern[str]
  replacement: Replacement
  safe: bool = True

  @property
  def source(self) -> str:
    return self.pattern.pattern


@dataclass(frozen=True)
class MatchRecord:
  """A detection rule that matched somewhere in a file."""

  file: str
  message: str
  pattern_source: str


@dataclass(frozen=True)
class UpgradeOptions:
  """Run options for an upgrade."""

  target_version: str | None = None
  dry_run: bool = False
  safe_mode: bool = True
  verbose: bool = False
  update_gems: bool = False
  update_configs: bool = False
  update_migrations: bool = False
  update_job_namespaces: bool = False
  update_api_module: bool = False
  update_stock_jobs: bool = False
  update_order_jobs: bool = False
  update_pos_status_jobs: bool = False


@dataclass(frozen=True)
class UpgradeResult:
  """Outcome of an upgrade run."""

  records: Sequence[MatchRecord]
  changed_files: Sequence[str] = field(default_factory=list)
  unresolved: Sequence[MatchRecord] = field(default_factory=list)

  @property
  def changed(self) -> bool:
    return bool(self.changed_files)
