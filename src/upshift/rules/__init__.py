"""Rule registries, extensions and the built-in catalogue."""

from upshift.rules.extensions import (
  Extension,
  ExtensionNotFoundError,
  ExtensionRegistry,
  create_extension,
  extensions,
  register_extension,
)
from upshift.rules.registry import RuleRegistry

__all__ = [
  "Extension",
  "ExtensionNotFoundError",
  "ExtensionRegistry",
  "RuleRegistry",
  "create_extension",
  "extensions",
  "register_extension",
]
