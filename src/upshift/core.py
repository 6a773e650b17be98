"""Analysis and upgrade entry points."""

import dataclasses
from pathlib import Path

from upshift.detect import detect_target_version
from upshift.models import MatchRecord, UpgradeOptions, UpgradeResult
from upshift.rewriter import Rewriter
from upshift.rules.extensions import ExtensionRegistry
from upshift.rules.extensions import extensions as default_extensions
from upshift.rules.registry import RuleRegistry
from upshift.scanner import Scanner


def build_registry(extensions: ExtensionRegistry | None = None) -> RuleRegistry:
  """Create a registry with the built-in rules and every extension applied.

  Args:
    extensions: Extensions to apply. Defaults to the process-wide registry.
  """
  registry = RuleRegistry.with_builtins()
  (extensions if extensions is not None else default_extensions).apply_to(registry)
  return registry


def analyze(
  root: Path | str,
  target_version: str | None = None,
  registry: RuleRegistry | None = None,
) -> list[MatchRecord]:
  """Report every detection rule match under root. Never writes."""
  root = Path(root)
  target = target_version or detect_target_version(root)
  return Scanner(registry or build_registry()).scan(root, target)


def upgrade(
  root: Path | str,
  options: UpgradeOptions | None = None,
  registry: RuleRegistry | None = None,
) -> UpgradeResult:
  """Analyze root, then rewrite what the registered rules can fix.

  Nothing is written when options.dry_run is set.

  Raises:
    FileWriteError: A changed file could not be persisted.
  """
  root = Path(root)
  options = options or UpgradeOptions()
  if options.target_version is None:
    options = dataclasses.replace(options, target_version=detect_target_version(root))

  registry = registry or build_registry()
  records = Scanner(registry).scan(root, options.target_version)
  return Rewriter(registry, options).rewrite(root, records)
