"""Rule registration for a single scan/rewrite session."""

import logging
import re
from typing import TYPE_CHECKING

from upshift.models import Constraint, DetectionRule, Replacement, RewriteRule

if TYPE_CHECKING:
  from upshift.rules.extensions import Extension

logger = logging.getLogger(__name__)

PatternLike = str | re.Pattern[str]


def compile_pattern(pattern: PatternLike) -> re.Pattern[str] | None:
  """Compile a pattern with line anchors enabled.

  Returns None (after logging) when the pattern is not a valid
  regular expression.
  """
  try:
    if isinstance(pattern, re.Pattern):
      return re.compile(pattern.pattern, pattern.flags | re.MULTILINE)
    return re.compile(pattern, re.MULTILINE)
  except re.error as e:
    source = pattern.pattern if isinstance(pattern, re.Pattern) else pattern
    logger.warning("Ignoring invalid pattern %r: %s", source, e)
    return None


def pattern_source(pattern: PatternLike) -> str:
  """Literal source text of a pattern, the key rewrites are stored under."""
  return pattern.pattern if isinstance(pattern, re.Pattern) else pattern


class RuleRegistry:
  """Detection and rewrite rules for one run.

  Detection rules are append-only and keep registration order.
  Rewrite rules are keyed by pattern source text: two patterns with the
  same source are the same rule, and the last one registered wins.

  Example:
    registry = RuleRegistry.with_builtins()
    registry.register_rewrite(r"Time\\.now", "Time.zone.now")
  """

  def __init__(self) -> None:
    self._detections: list[DetectionRule] = []
    self._rewrites: dict[str, RewriteRule] = {}
    self._applied: set[str] = set()

  @classmethod
  def with_builtins(cls) -> "RuleRegistry":
    """Create a registry holding the built-in detection rules."""
    from upshift.rules.builtin import BUILTIN_DETECTIONS

    registry = cls()
    registry._detections.extend(BUILTIN_DETECTIONS)
    return registry

  @property
  def detections(self) -> list[DetectionRule]:
    return list(self._detections)

  @property
  def rewrites(self) -> dict[str, RewriteRule]:
    return dict(self._rewrites)

  def register_detection(
    self,
    pattern: PatternLike,
    message: str,
    file_glob: str,
    version_constraint: Constraint | None = None,
  ) -> DetectionRule | None:
    """Append a detection rule.

    Returns the registered rule, or None if the pattern is invalid.
    """
    compiled = compile_pattern(pattern)
    if compiled is None:
      return None

    rule = DetectionRule(
      pattern=compiled,
      message=message,
      file_glob=file_glob,
      version_constraint=version_constraint,
    )
    self.add_detection(rule)
    return rule

  def add_detection(self, rule: DetectionRule) -> None:
    self._detections.append(rule)

  def register_rewrite(
    self,
    pattern: PatternLike,
    replacement: Replacement,
    safe: bool = True,
  ) -> RewriteRule | None:
    """Register a rewrite, replacing any rule with the same pattern source.

    Returns the registered rule, or None if the pattern is invalid.
    """
    compiled = compile_pattern(pattern)
    if compiled is None:
      return None

    rule = RewriteRule(pattern=compiled, replacement=replacement, safe=safe)
    self.add_rewrite(rule)
    return rule

  def add_rewrite(self, rule: RewriteRule) -> None:
    if rule.source in self._rewrites:
      logger.debug("Rewrite for %r replaced by a later registration", rule.source)
    self._rewrites[rule.source] = rule

  def find_rewrite(self, source: str) -> RewriteRule | None:
    """Get the registered rewrite for a pattern source, if any."""
    return self._rewrites.get(source)

  def apply_extension(self, extension: "Extension") -> bool:
    """Merge an extension's rules into this registry.

    Applying an extension with a name already applied is a no-op.

    Returns:
      True if the extension's rules were added.
    """
    if extension.name in self._applied:
      return False

    self._applied.add(extension.name)
    for rule in extension.detections:
      self.add_detection(rule)
    for rule in extension.rewrites.values():
      self.add_rewrite(rule)
    return True

  def applied_extensions(self) -> list[str]:
    return sorted(self._applied)
