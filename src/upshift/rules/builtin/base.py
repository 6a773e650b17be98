"""Building blocks for the built-in rule catalogue."""

import re
from dataclasses import dataclass
from typing import Callable

from upshift.models import DetectionRule

RUBY_FILES = "**/*.rb"
VIEW_FILES = "**/*.{rb,erb,haml,slim}"

MatchReplacement = Callable[[re.Match[str]], str]
ContextReplacement = Callable[[re.Match[str], str], str]


def detection(
  pattern: str,
  message: str,
  file_glob: str = RUBY_FILES,
  version_constraint: str | None = None,
) -> DetectionRule:
  """Build a built-in detection rule with line anchors enabled."""
  return DetectionRule(
    pattern=re.compile(pattern, re.MULTILINE),
    message=message,
    file_glob=file_glob,
    version_constraint=version_constraint,
  )


@dataclass(frozen=True)
class Substitution:
  """A self-contained rewrite for text matching one detection pattern.

  The replacement is a template with numbered back-references, a
  function of the match, or (with ``needs_content``) a function of the
  match and the whole file content.
  """

  pattern: re.Pattern[str]
  replacement: str | MatchReplacement | ContextReplacement
  needs_content: bool = False

  def apply(self, content: str) -> str:
    """Replace every non-overlapping occurrence in content."""
    if self.needs_content:
      replace = self.replacement
      return self.pattern.sub(lambda m: replace(m, content), content)  # type: ignore[call-arg, arg-type]
    return self.pattern.sub(self.replacement, content)  # type: ignore[arg-type]


def substitution(
  pattern: str,
  replacement: str | MatchReplacement | ContextReplacement,
  needs_content: bool = False,
) -> Substitution:
  return Substitution(re.compile(pattern, re.MULTILINE), replacement, needs_content)
