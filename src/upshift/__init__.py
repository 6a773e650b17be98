"""Pattern-based upgrade assistant for Rails applications."""

__version__ = "0.1.0"

from upshift.core import analyze, build_registry, upgrade  # noqa: E402
from upshift.files import FileWriteError  # noqa: E402
from upshift.models import (  # noqa: E402
  DetectionRule,
  MatchRecord,
  RewriteRule,
  UpgradeOptions,
  UpgradeResult,
)
from upshift.rules import (  # noqa: E402
  Extension,
  ExtensionRegistry,
  RuleRegistry,
  create_extension,
  register_extension,
)

__all__ = [
  "DetectionRule",
  "Extension",
  "ExtensionRegistry",
  "FileWriteError",
  "MatchRecord",
  "RewriteRule",
  "RuleRegistry",
  "UpgradeOptions",
  "UpgradeResult",
  "analyze",
  "build_registry",
  "create_extension",
  "register_extension",
  "upgrade",
]
