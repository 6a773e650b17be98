"""Module renames and job class relocations into new namespaces.

A relocated class moves to its new file and the old file becomes a
forwarding stub that aliases the old constant to the new one, so
existing callers keep working during the transition. Files are never
deleted.
"""

import logging
import re
import textwrap
from dataclasses import dataclass
from pathlib import Path

from upshift.files import glob_files, is_protected, read_text, rewrite_file, write_text
from upshift.models import UpgradeOptions

logger = logging.getLogger(__name__)

STUB_HEADER = "# upshift: forwarding stub"

API_FILES = (
  "app/controllers/api/**/*.rb",
  "config/routes.rb",
  "spec/factories/api_*.rb",
  "spec/controllers/api/**/*.rb",
)

_API_NAME = re.compile(r"\bAPI\b")


def camelize(name: str) -> str:
  """Convert a snake_case file name to a CamelCase constant name."""
  return "".join(part.capitalize() for part in name.split("_"))


@dataclass(frozen=True)
class Relocation:
  """Move one class to a new constant and file."""

  source: str
  target: str
  old_constant: str
  new_constant: str
  bare_references: bool = False

  @property
  def old_name(self) -> str:
    return self.old_constant.split("::")[-1]

  @property
  def new_name(self) -> str:
    return self.new_constant.split("::")[-1]

  def reference_pattern(self) -> re.Pattern[str]:
    """Pattern for references to the old constant in other files."""
    guard = r"(?<![\w:])" if self.bare_references else r"(?<!\w)"
    return re.compile(rf"{guard}{re.escape(self.old_constant)}\b")


def stock_job_relocations(root: Path) -> list[Relocation]:
  """Inventory::<Name>StockJob -> Sidekiq::Stock::<Name>."""
  relocations = []
  for rel_path in glob_files(root, "app/jobs/inventory/*_stock_job.rb"):
    job = Path(rel_path).stem.removesuffix("_stock_job")
    name = camelize(job)
    relocations.append(Relocation(
      source=rel_path,
      target=f"app/jobs/sidekiq/stock/{job}.rb",
      old_constant=f"Inventory::{name}StockJob",
      new_constant=f"Sidekiq::Stock::{name}",
    ))
  return relocations


def order_job_relocations(root: Path) -> list[Relocation]:
  """SidekiqJobs::Orders::<Kind>::<Name> -> Sidekiq::Orders::<Kind>::<Name>."""
  relocations = []
  for kind in ("process", "notifications"):
    for rel_path in glob_files(root, f"app/jobs/sidekiq_jobs/orders/{kind}/*.rb"):
      stem = Path(rel_path).stem
      name = camelize(stem)
      relocations.append(Relocation(
        source=rel_path,
        target=f"app/jobs/sidekiq/orders/{kind}/{stem}.rb",
        old_constant=f"SidekiqJobs::Orders::{camelize(kind)}::{name}",
        new_constant=f"Sidekiq::Orders::{camelize(kind)}::{name}",
      ))
  return relocations


def pos_status_relocations(root: Path) -> list[Relocation]:
  """CheckJob -> Sidekiq::PosStatus::Check."""
  if not (root / "app/jobs/check_job.rb").is_file():
    return []
  return [Relocation(
    source="app/jobs/check_job.rb",
    target="app/jobs/sidekiq/pos_status/check.rb",
    old_constant="CheckJob",
    new_constant="Sidekiq::PosStatus::Check",
    bare_references=True,
  )]


def extract_class(content: str, name: str) -> tuple[str, str] | None:
  """Find a class definition by name.

  Returns:
    (superclass clause, body) with the body dedented, or None if the
    class or its closing ``end`` cannot be found.
  """
  header = re.compile(
    rf"^([ \t]*)class[ \t]+{re.escape(name)}\b([ \t]*<[ \t]*[\w:]+)?[^\n]*\n",
    re.MULTILINE,
  )
  match = header.search(content)
  if match is None:
    return None

  indent = match.group(1)
  closing = re.compile(rf"^{re.escape(indent)}end\b", re.MULTILINE)
  end = closing.search(content, match.end())
  if end is None:
    return None

  superclass = (match.group(2) or "").strip()
  body = textwrap.dedent(content[match.end():end.start()]).strip("\n")
  return superclass, body


def _nest(modules: list[str], inner: list[str]) -> list[str]:
  """Wrap lines in nested ``module`` blocks."""
  lines = []
  for depth, module in enumerate(modules):
    lines.append(f"{'  ' * depth}module {module}")
  pad = "  " * len(modules)
  lines.extend(f"{pad}{line}" if line else line for line in inner)
  for depth in reversed(range(len(modules))):
    lines.append(f"{'  ' * depth}end")
  return lines


def relocated_class(relocation: Relocation, superclass: str, body: str) -> str:
  modules = relocation.new_constant.split("::")[:-1]
  declaration = f"class {relocation.new_name}"
  if superclass:
    declaration += f" {superclass}"
  inner = [declaration, *textwrap.indent(body, "  ").split("\n"), "end"] if body else [declaration, "end"]
  return "\n".join(_nest(modules, inner)) + "\n"


def forwarding_stub(relocation: Relocation) -> str:
  modules = relocation.old_constant.split("::")[:-1]
  header = [
    f"{STUB_HEADER}. {relocation.old_constant} moved to {relocation.new_constant}.",
    f"# Remove this file once nothing references {relocation.old_constant}.",
    "",
  ]
  alias = [f"{relocation.old_name} = ::{relocation.new_constant}"]
  return "\n".join(header + _nest(modules, alias)) + "\n"


def relocate(root: Path, relocation: Relocation) -> list[str]:
  """Move a class to its new namespace and leave a stub behind.

  Returns:
    Relative paths written (new file, updated references, stub).
  """
  source = root / relocation.source
  try:
    content = read_text(source)
  except (OSError, UnicodeDecodeError) as e:
    logger.warning("Cannot relocate %s: %s", relocation.source, e)
    return []
  if content.startswith(STUB_HEADER):
    logger.debug("%s already relocated", relocation.source)
    return []

  extracted = extract_class(content, relocation.old_name)
  if extracted is None:
    logger.warning(
      "Cannot relocate %s: class %s not found in %s",
      relocation.old_constant, relocation.old_name, relocation.source,
    )
    return []
  superclass, body = extracted

  changed: list[str] = []
  target = root / relocation.target
  if target.exists():
    logger.info("%s already exists, keeping it", relocation.target)
  else:
    write_text(target, relocated_class(relocation, superclass, body), root)
    changed.append(relocation.target)

  # The stub marks the move as done, so it is written last
  changed.extend(update_references(root, relocation))

  write_text(source, forwarding_stub(relocation), root)
  changed.append(relocation.source)
  logger.info("Moved %s to %s", relocation.old_constant, relocation.new_constant)
  return changed


def update_references(root: Path, relocation: Relocation) -> list[str]:
  """Point references in other Ruby files at the new constant."""
  pattern = relocation.reference_pattern()
  skip = {relocation.source, relocation.target}
  changed = []
  for rel_path in glob_files(root, "**/*.rb"):
    if rel_path in skip or is_protected(rel_path):
      continue
    if rewrite_file(root / rel_path, lambda c: pattern.sub(relocation.new_constant, c), root):
      changed.append(rel_path)
  return changed


def rename_api_module(root: Path) -> list[str]:
  """Rename the API module to Api wherever API controllers live."""
  changed = []
  for file_glob in API_FILES:
    for rel_path in glob_files(root, file_glob):
      if rel_path in changed:
        continue
      if rewrite_file(root / rel_path, lambda c: _API_NAME.sub("Api", c), root):
        changed.append(rel_path)
  if changed:
    logger.info("Renamed API module to Api in %d file(s)", len(changed))
  return changed


def update_namespaces(root: Path, options: UpgradeOptions) -> list[str]:
  """Run the namespace transformations enabled by options."""
  everything = options.update_job_namespaces
  changed: list[str] = []

  if everything or options.update_api_module:
    changed.extend(rename_api_module(root))

  planners = (
    (options.update_stock_jobs, stock_job_relocations),
    (options.update_order_jobs, order_job_relocations),
    (options.update_pos_status_jobs, pos_status_relocations),
  )
  for enabled, plan in planners:
    if not (everything or enabled):
      continue
    for relocation in plan(root):
      changed.extend(relocate(root, relocation))

  return changed
