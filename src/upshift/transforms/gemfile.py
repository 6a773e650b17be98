"""Gemfile updates for the target Rails version."""

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from upshift import version
from upshift.files import read_text, write_text

logger = logging.getLogger(__name__)

GEMFILE = "Gemfile"

_RAILS_GEM = re.compile(r"""gem\s+['"]rails['"],\s+['"][^'"\n]*['"]""")
_RUBY_DIRECTIVE = re.compile(r"^[ \t]*ruby\b", re.MULTILINE)
# Any requirement form: '3.1', "~> 2.6.3", ruby('3.0.0')
_RUBY_VERSION = re.compile(r"""^[ \t]*ruby\b[ \t(]*['"][~><=! \t]*(\d+\.\d+)""", re.MULTILINE)


@dataclass(frozen=True)
class GemEdit:
  """Replace a whole gem line when the target version satisfies constraint.

  Lines are matched from their start, so a line already commented out is
  never edited again.
  """

  gem: str
  replacement: str
  constraint: str

  @property
  def pattern(self) -> re.Pattern[str]:
    return re.compile(
      rf"""^([ \t]*)gem\s+['"]{re.escape(self.gem)}['"].*$""",
      re.MULTILINE,
    )

  def apply(self, content: str, target_version: str) -> str:
    if not version.applies(target_version, self.constraint):
      return content
    return self.pattern.sub(lambda m: f"{m.group(1)}{self.replacement}", content)


# Release line pins, checked from newest to oldest
RAILS_LINES = (
  ("7.0.0", "~> 7.0.0", "3.0.0"),
  ("6.0.0", "~> 6.1.0", "2.7.0"),
  ("5.0.0", "~> 5.2.0", "2.5.0"),
)

INCOMPATIBLE_GEMS = (
  GemEdit("sass-rails", "gem 'cssbundling-rails'", ">= 7.0.0"),
  GemEdit("uglifier", "gem 'jsbundling-rails'", ">= 7.0.0"),
  GemEdit("coffee-rails", "# gem 'coffee-rails' # Removed in Rails 7", ">= 7.0.0"),
  GemEdit("jquery-rails", "# gem 'jquery-rails' # Consider using importmap-rails in Rails 7", ">= 7.0.0"),
  GemEdit("coffee-rails", "# gem 'coffee-rails' # Consider using webpacker in Rails 6", ">= 6.0.0"),
  GemEdit("grape_on_rails_routes", "# gem 'grape_on_rails_routes' # Incompatible with Rails 5.x", ">= 5.0.0"),
  GemEdit("protected_attributes", "# gem 'protected_attributes' # Removed in Rails 5", ">= 5.0.0"),
  GemEdit(
    "activerecord-deprecated_finders",
    "# gem 'activerecord-deprecated_finders' # Removed in Rails 5",
    ">= 5.0.0",
  ),
  GemEdit("rspec-rails", "gem 'rspec-rails', '~> 4.0' # Updated for Rails 5.x compatibility", "< 6.0.0"),
)

# Keyed by Ruby "major.minor"
RUBY_PINS = {
  "2.6": GemEdit("nokogiri", "gem 'nokogiri', '~> 1.13.10' # Pinned for Ruby 2.6.x compatibility", ">= 5.0.0"),
  "2.5": GemEdit("nokogiri", "gem 'nokogiri', '~> 1.12.5' # Pinned for Ruby 2.5.x compatibility", ">= 5.0.0"),
}

BOOTSNAP_NOTICE = "# Added by upshift for Rails 5.2.0"
BOOTSNAP_GEM = "gem 'bootsnap', '>= 1.1.0', require: false"


def update_gemfile_content(content: str, target_version: str) -> str:
  """Return Gemfile content updated for the target Rails version."""
  line = _release_line(target_version)
  if line is None:
    return content
  minimum, rails_pin, ruby_default = line

  content = _RAILS_GEM.sub(f"gem 'rails', '{rails_pin}'", content)

  for edit in INCOMPATIBLE_GEMS:
    content = edit.apply(content, target_version)

  has_directive = _RUBY_DIRECTIVE.search(content) is not None
  ruby_match = _RUBY_VERSION.search(content)
  ruby_line = ruby_match.group(1) if ruby_match else version.major_minor(ruby_default)
  pin = RUBY_PINS.get(ruby_line)
  if pin is not None:
    content = pin.apply(content, target_version)

  if minimum == "5.0.0" and "bootsnap" not in content:
    if not content.endswith("\n"):
      content += "\n"
    content += f"\n{BOOTSNAP_NOTICE}\n{BOOTSNAP_GEM}\n"

  if not has_directive:
    content = f"ruby '{ruby_default}'\n" + content

  return content


def _release_line(target_version: str) -> tuple[str, str, str] | None:
  for line in RAILS_LINES:
    if version.version_at_least(target_version, line[0]):
      return line
  return None


def update_gemfile(root: Path, target_version: str) -> list[str]:
  """Rewrite the root Gemfile's pins for the target version.

  Returns:
    ["Gemfile"] if it changed, else an empty list.
  """
  path = root / GEMFILE
  if not path.is_file():
    logger.debug("No Gemfile under %s", root)
    return []

  try:
    original = read_text(path)
  except (OSError, UnicodeDecodeError) as e:
    logger.warning("Skipping Gemfile: %s", e)
    return []
  updated = update_gemfile_content(original, target_version)
  if updated == original:
    return []

  write_text(path, updated, root)
  logger.info("Updated Gemfile for Rails %s", target_version)
  return [GEMFILE]
