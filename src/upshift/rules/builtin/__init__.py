"""Built-in rule catalogue.

Detection rules keep a fixed declaration order. Substitutions are keyed
by the source text of the detection pattern they fix.

Sources containing an unsafe marker (default_scope, update_all,
config.hosts, config.load_defaults) have no built-in substitution, so
they are always reported for manual review and safe mode changes
nothing for them. The markers gate any substitution added for such a
source later. A custom rewrite for the same source is gated by its own
``safe`` flag instead.
"""

from upshift.models import DetectionRule
from upshift.rules.builtin import active_record, conventions, deprecations, naming, project
from upshift.rules.builtin.base import Substitution

_MODULES = (deprecations, active_record, conventions, naming, project)

BUILTIN_DETECTIONS: list[DetectionRule] = [
  rule for module in _MODULES for rule in module.DETECTIONS
]

BUILTIN_SUBSTITUTIONS: dict[str, Substitution] = {
  source: sub for module in _MODULES for source, sub in module.SUBSTITUTIONS.items()
}

# Pattern fragments whose fixes need a human decision
UNSAFE_MARKERS = (
  "default_scope",
  "update_all",
  r"config\.hosts",
  r"config\.load_defaults",
)


def find_substitution(source: str) -> Substitution | None:
  """Get the built-in substitution for a detection pattern source."""
  return BUILTIN_SUBSTITUTIONS.get(source)


def is_unsafe_source(source: str) -> bool:
  """Check whether a built-in pattern is unsafe to fix automatically."""
  return any(marker in source for marker in UNSAFE_MARKERS)


__all__ = [
  "BUILTIN_DETECTIONS",
  "BUILTIN_SUBSTITUTIONS",
  "Substitution",
  "UNSAFE_MARKERS",
  "find_substitution",
  "is_unsafe_source",
]
