"""Module naming, job namespace and client configuration rules."""

import re

from upshift.rules.builtin.base import detection, substitution

JOB_FILES = "app/jobs/**/*.rb"

MODULE_API = r"module\s+API\b"
API_REFERENCE = r"\bAPI::"
NESTED_JOB_CLASS = r"class\s+\w+::\w+Job\s+<\s+ApplicationJob"
INVENTORY_STOCK_JOB = r"(?s)module\s+Inventory\s+.*class\s+\w+StockJob"
CHECK_JOB = r"class\s+CheckJob\s+<\s+ApplicationJob"
SETTINGS_BOOLEANS = r"settings\s*=\s*\{[^}]*=>\s*(?:true|false)\b"
SETTINGS_SYMBOL_KEYS = r"settings\s*=\s*\{[^}]*:[a-zA-Z_]+\s*=>"
SETTINGS_QUERY = r"""where\(["']settings\s*->>\s*['"][^)]*\)"""

_SETTINGS_HASH = r"settings\s*=\s*\{[^}]*\}"
_BOOLEAN_VALUE = re.compile(r"(=>\s*)(true|false)\b")
_SYMBOL_KEY = re.compile(r"(?<![\w:]):([a-zA-Z_]\w*)(\s*=>)")


def quote_booleans(match: re.Match[str]) -> str:
  """Store boolean settings as the strings "true" and "false"."""
  return _BOOLEAN_VALUE.sub(r'\1"\2"', match.group(0))


def string_keys(match: re.Match[str]) -> str:
  """Replace symbol keys in a settings hash with string keys."""
  return _SYMBOL_KEY.sub(r'"\1"\2', match.group(0))


DETECTIONS = [
  detection(
    MODULE_API,
    "Module named 'API' might cause Rails autoloading issues - consider 'Api' instead",
  ),
  detection(
    NESTED_JOB_CLASS,
    "Consider using Sidekiq namespace pattern (Sidekiq::*::*) for job classes",
    file_glob=JOB_FILES,
  ),
  detection(
    INVENTORY_STOCK_JOB,
    "Consider transitioning from Inventory::*StockJob to Sidekiq::Stock::* namespace",
    file_glob=JOB_FILES,
  ),
  detection(
    CHECK_JOB,
    "Consider using Sidekiq::PosStatus::Check namespace instead of CheckJob",
    file_glob=JOB_FILES,
  ),
  detection(
    SETTINGS_BOOLEANS,
    'Boolean values in client configuration settings should be stored as '
    'strings: "true" or "false"',
  ),
  detection(
    SETTINGS_SYMBOL_KEYS,
    "Use string keys (not symbols) in client configuration settings",
  ),
  detection(
    SETTINGS_QUERY,
    "Consider using PostgreSQL cast for boolean settings: (settings ->> 'key')::boolean",
  ),
  detection(
    MODULE_API,
    "Module named 'API' should be renamed to 'Api' for Rails autoloading",
    file_glob="app/{controllers,models}/**/*.rb",
  ),
  detection(
    API_REFERENCE,
    "Reference to 'API::' module should be updated to 'Api::' for Rails autoloading",
  ),
]

SUBSTITUTIONS = {
  MODULE_API: substitution(MODULE_API, "module Api"),
  API_REFERENCE: substitution(API_REFERENCE, "Api::"),
  SETTINGS_BOOLEANS: substitution(_SETTINGS_HASH, quote_booleans),
  SETTINGS_SYMBOL_KEYS: substitution(_SETTINGS_HASH, string_keys),
}
