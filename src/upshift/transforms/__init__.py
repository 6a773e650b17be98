"""Whole-file transformations run after the per-record rewrite pass.

Each transformation is idempotent and only runs when its option is set.
"""

import logging
from pathlib import Path

from upshift.models import UpgradeOptions
from upshift.transforms.configs import update_configs
from upshift.transforms.gemfile import update_gemfile
from upshift.transforms.migrations import update_migrations
from upshift.transforms.namespaces import update_namespaces

logger = logging.getLogger(__name__)


def apply_transforms(root: Path, options: UpgradeOptions) -> list[str]:
  """Run the enabled transformations in order.

  Returns:
    Relative paths changed, without duplicates.
  """
  target = options.target_version
  changed: list[str] = []

  if target is None and (options.update_gems or options.update_configs or options.update_migrations):
    logger.warning("No target version, skipping Gemfile, config and migration updates")
  elif target is not None:
    if options.update_gems:
      changed.extend(update_gemfile(root, target))
    if options.update_configs:
      changed.extend(update_configs(root, target))
    if options.update_migrations:
      changed.extend(update_migrations(root, target))

  changed.extend(update_namespaces(root, options))

  unique: list[str] = []
  for rel_path in changed:
    if rel_path not in unique:
      unique.append(rel_path)
  return unique


__all__ = [
  "apply_transforms",
  "update_configs",
  "update_gemfile",
  "update_migrations",
  "update_namespaces",
]
