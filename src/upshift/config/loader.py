"""Configuration file loading."""

from pathlib import Path

import yaml

from upshift.config.settings import Settings

CONFIG_FILENAMES = [".upshift.yaml", ".upshift.yml", "upshift.yaml", "upshift.yml"]


def _find_config_file(config_path: Path | None = None, cwd: Path | None = None) -> Path | None:
  """Find config file path, or None if no config exists."""
  if config_path:
    return config_path

  base = cwd or Path.cwd()
  for filename in CONFIG_FILENAMES:
    path = base / filename
    if path.exists():
      return path

  return None


def load_config(config_path: Path | None = None, cwd: Path | None = None) -> Settings:
  """Load configuration from file or defaults."""
  path = _find_config_file(config_path, cwd)
  if path:
    return _load_from_file(path)
  return Settings()


def _load_from_file(path: Path) -> Settings:
  """Load settings from a YAML file."""
  if not path.exists():
    raise FileNotFoundError(f"Config file not found: {path}")

  with open(path) as f:
    data = yaml.safe_load(f) or {}

  return _parse_config(data)


def _parse_config(data: dict) -> Settings:
  """Parse config dict into Settings."""
  if "target_version" in data and data["target_version"] is not None:
    # YAML reads 7.0 as a float
    data["target_version"] = str(data["target_version"])

  if "format" in data:
    data["output_format"] = data.pop("format")

  return Settings(**data)
