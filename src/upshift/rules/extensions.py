"""Named bundles of detection and rewrite rules supplied by callers."""

from upshift.models import Constraint, DetectionRule, Replacement, RewriteRule
from upshift.rules.registry import PatternLike, RuleRegistry, compile_pattern


class ExtensionNotFoundError(Exception):
  """Requested extension is not registered."""


class Extension:
  """A named set of rules merged into a registry at run time.

  Example:
    ext = Extension("timezones", "Prefer zone-aware time helpers")
    ext.register_detection(r"Time\\.zone\\.now", "Use Time.current", "**/*.rb")
    ext.register_rewrite(r"Time\\.zone\\.now", "Time.current")
  """

  def __init__(self, name: str, description: str = ""):
    self.name = name
    self.description = description
    self._detections: list[DetectionRule] = []
    self._rewrites: dict[str, RewriteRule] = {}

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
    """Add a detection rule to this extension."""
    compiled = compile_pattern(pattern)
    if compiled is None:
      return None

    rule = DetectionRule(
      pattern=compiled,
      message=message,
      file_glob=file_glob,
      version_constraint=version_constraint,
    )
    self._detections.append(rule)
    return rule

  def register_rewrite(
    self,
    pattern: PatternLike,
    replacement: Replacement,
    safe: bool = True,
  ) -> RewriteRule | None:
    """Add a rewrite, replacing any with the same pattern source."""
    compiled = compile_pattern(pattern)
    if compiled is None:
      return None

    rule = RewriteRule(pattern=compiled, replacement=replacement, safe=safe)
    self._rewrites[rule.source] = rule
    return rule

  def __repr__(self) -> str:
    return (
      f"Extension({self.name!r}, detections={len(self._detections)}, "
      f"rewrites={len(self._rewrites)})"
    )


class ExtensionRegistry:
  """Extensions keyed by name, kept in registration order."""

  def __init__(self) -> None:
    self._extensions: dict[str, Extension] = {}

  def register(self, extension: Extension) -> Extension:
    """Register an extension, replacing any with the same name."""
    self._extensions[extension.name] = extension
    return extension

  def get(self, name: str) -> Extension | None:
    return self._extensions.get(name)

  def all(self) -> list[Extension]:
    return list(self._extensions.values())

  def names(self) -> list[str]:
    return list(self._extensions.keys())

  def remove(self, name: str) -> Extension:
    """Unregister an extension by name."""
    if name not in self._extensions:
      available = ", ".join(self._extensions) or "none"
      raise ExtensionNotFoundError(
        f"Extension '{name}' not found. Registered: {available}"
      )
    return self._extensions.pop(name)

  def clear(self) -> None:
    self._extensions.clear()

  def apply_to(self, registry: RuleRegistry) -> None:
    """Merge every registered extension into a rule registry."""
    for extension in self._extensions.values():
      registry.apply_extension(extension)

  def __len__(self) -> int:
    return len(self._extensions)

  def __contains__(self, name: object) -> bool:
    return name in self._extensions


# Process-wide extensions. Lives until exit; call clear() between
# independent runs that register their own extensions.
extensions = ExtensionRegistry()


def register_extension(extension: Extension) -> Extension:
  """Register an extension with the process-wide registry."""
  return extensions.register(extension)


def create_extension(name: str, description: str = "") -> Extension:
  """Create an extension and register it with the process-wide registry."""
  return register_extension(Extension(name, description))
