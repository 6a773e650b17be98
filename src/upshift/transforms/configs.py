"""Framework configuration updates for the target Rails version."""

import logging
import re
from pathlib import Path

from upshift import version
from upshift.files import rewrite_file

logger = logging.getLogger(__name__)

BOOT = "config/boot.rb"
APPLICATION = "config/application.rb"
DEVELOPMENT = "config/environments/development.rb"
PRODUCTION = "config/environments/production.rb"

_BUNDLER_SETUP = re.compile(r"^(.*require ['\"]bundler/setup['\"].*)$", re.MULTILINE)
_LOAD_DEFAULTS = re.compile(r"config\.load_defaults\s+[\d.]+")
_APPLICATION_CLASS = re.compile(r"^([ \t]*)class Application < Rails::Application[ \t]*\n", re.MULTILINE)
_MAILER_SETTING = re.compile(r"^[ \t]*config\.action_mailer.*\n", re.MULTILINE)
_CONFIGURE_BLOCK = re.compile(r"^[ \t]*Rails\.application\.configure do[ \t]*\n", re.MULTILINE)
_UGLIFIER = re.compile(r"^([ \t]*)config\.assets\.js_compressor = :uglifier", re.MULTILINE)

HOSTS_LINES = "  # Allow all hosts in development\n  config.hosts.clear\n"


def add_bootsnap(content: str) -> str:
  if "bootsnap/setup" in content:
    return content
  return _BUNDLER_SETUP.sub(
    lambda m: f"{m.group(1)}\nrequire 'bootsnap/setup' # Speed up boot time by caching expensive operations.",
    content,
    count=1,
  )


def set_load_defaults(content: str, target_version: str) -> str:
  """Insert or update config.load_defaults with the target's major.minor."""
  defaults = version.major_minor(target_version)
  if "config.load_defaults" in content:
    return _LOAD_DEFAULTS.sub(f"config.load_defaults {defaults}", content)
  return _APPLICATION_CLASS.sub(
    lambda m: f"{m.group(0)}{m.group(1)}  config.load_defaults {defaults}\n",
    content,
    count=1,
  )


def allow_development_hosts(content: str) -> str:
  if "config.hosts" in content:
    return content
  anchor = _MAILER_SETTING.search(content) or _CONFIGURE_BLOCK.search(content)
  if anchor is None:
    return content
  insert = anchor.end()
  prefix = "\n" if anchor.re is _MAILER_SETTING else ""
  return f"{content[:insert]}{prefix}{HOSTS_LINES}{content[insert:]}"


def drop_uglifier(content: str) -> str:
  return _UGLIFIER.sub(r"\1# config.assets.js_compressor = :terser", content)


def update_configs(root: Path, target_version: str) -> list[str]:
  """Update framework config files under root.

  Returns:
    Relative paths of the files that changed.
  """
  edits = [
    (APPLICATION, lambda c: set_load_defaults(c, target_version), "0.0.0"),
    (BOOT, add_bootsnap, "5.2.0"),
    (DEVELOPMENT, allow_development_hosts, "6.0.0"),
    (PRODUCTION, drop_uglifier, "7.0.0"),
  ]

  changed: list[str] = []
  for rel_path, transform, minimum in edits:
    path = root / rel_path
    if not path.is_file() or not version.version_at_least(target_version, minimum):
      continue
    if rewrite_file(path, transform, root):
      logger.info("Updated %s", rel_path)
      changed.append(rel_path)
  return changed
