"""Target version detection from the project's Gemfile."""

import re
from pathlib import Path

DEFAULT_TARGET_VERSION = "7.0.0"

_RAILS_PINS = (
  re.compile(r"""gem\s+['"]rails['"],\s+['"]~>\s+([\d.]+)['"]"""),
  re.compile(r"""gem\s+['"]rails['"],\s+['"]>=\s+([\d.]+)['"]"""),
)
_RAILS_GEM = re.compile(r"""^\s*gem\s+['"]rails['"]""", re.MULTILINE)


def _read_gemfile(root: Path) -> str | None:
  path = root / "Gemfile"
  if not path.is_file():
    return None
  try:
    return path.read_text(encoding="utf-8")
  except (OSError, UnicodeDecodeError):
    return None


def detect_target_version(root: Path | str) -> str:
  """Read the Rails version pinned in the Gemfile.

  Falls back to the latest supported release when no pin is found.
  """
  content = _read_gemfile(Path(root))
  if content:
    for pattern in _RAILS_PINS:
      match = pattern.search(content)
      if match:
        return match.group(1)
  return DEFAULT_TARGET_VERSION


def is_rails_app(root: Path | str) -> bool:
  """Check whether a directory looks like a Rails application."""
  root = Path(root)
  if (root / "config" / "application.rb").is_file():
    return True
  content = _read_gemfile(root)
  return bool(content and _RAILS_GEM.search(content))
