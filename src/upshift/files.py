"""File access shared by the scanner, rewriter and transformations."""

import glob as globmod
import logging
import re
from pathlib import Path

logger = logging.getLogger(__name__)


class FileWriteError(Exception):
  """A file selected for rewriting could not be written."""

  def __init__(self, path: str, reason: str):
    super().__init__(f"Cannot write {path}: {reason}")
    self.path = path
    self.reason = reason


# Schema dumps, migration history and third-party code are never rewritten
_PROTECTED = re.compile(
  r"(?:^|/)(?:schema\.rb$|structure\.sql$|migrate/|db/data/|vendor/|node_modules/|\.bundle/)"
)

_BRACES = re.compile(r"\{([^{}]*)\}")


def is_protected(relative_path: str) -> bool:
  """Check whether a path belongs to generated or externally owned files."""
  return bool(_PROTECTED.search(relative_path))


def expand_braces(pattern: str) -> list[str]:
  """Expand ``{a,b}`` alternation in a glob pattern.

  Example:
    expand_braces("**/*.{rb,erb}") -> ["**/*.rb", "**/*.erb"]
  """
  match = _BRACES.search(pattern)
  if not match:
    return [pattern]

  head, tail = pattern[:match.start()], pattern[match.end():]
  expanded: list[str] = []
  for option in match.group(1).split(","):
    for candidate in expand_braces(f"{head}{option}{tail}"):
      if candidate not in expanded:
        expanded.append(candidate)
  return expanded


def glob_files(root: Path, file_glob: str) -> list[str]:
  """Expand a glob against root and return matching regular files.

  ``**`` matches directories recursively and ``*`` stays within one
  path segment. Results are relative POSIX paths, sorted.
  """
  seen: set[str] = set()
  for pattern in expand_braces(file_glob):
    for match in globmod.glob(pattern, root_dir=root, recursive=True):
      if (root / match).is_file():
        seen.add(Path(match).as_posix())
  return sorted(seen)


def relative_path(path: Path, root: Path) -> str:
  try:
    return path.relative_to(root).as_posix()
  except ValueError:
    return path.as_posix()


def read_text(path: Path) -> str:
  return path.read_text(encoding="utf-8")


def write_text(path: Path, content: str, root: Path | None = None) -> None:
  """Write content, creating parent directories.

  Raises:
    FileWriteError: The write failed. Carries the path and the cause.
  """
  shown = relative_path(path, root) if root else str(path)
  try:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
  except OSError as e:
    raise FileWriteError(shown, e.strerror or str(e)) from e


def rewrite_file(path: Path, transform, root: Path) -> bool:
  """Apply a text transform to a file and persist it if it changed.

  Files that cannot be read as UTF-8 text are logged and left alone.

  Returns:
    True if the file was written.
  """
  try:
    original = read_text(path)
  except (OSError, UnicodeDecodeError) as e:
    logger.warning("Skipping %s: %s", relative_path(path, root), e)
    return False
  updated = transform(original)
  if updated == original:
    return False
  write_text(path, updated, root)
  return True
