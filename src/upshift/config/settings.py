"""Application settings."""

from pydantic import BaseModel, ConfigDict, field_validator

from upshift.models import UpgradeOptions
from upshift.version import InvalidVersionError, parse_version

OUTPUT_FORMATS = ("terminal", "json", "markdown")


class Settings(BaseModel):
  """Application configuration."""

  model_config = ConfigDict(extra="forbid")

  target_version: str | None = None
  dry_run: bool = False
  safe_mode: bool = True
  verbose: bool = False
  update_gems: bool = False
  update_configs: bool = False
  update_migrations: bool = False
  update_job_namespaces: bool = False
  update_api_module: bool = False
  update_stock_jobs: bool = False
  update_order_jobs: bool = False
  update_pos_status_jobs: bool = False
  output_format: str = "terminal"

  @field_validator("target_version")
  @classmethod
  def _check_version(cls, value: str | None) -> str | None:
    if value is not None:
      try:
        parse_version(value)
      except InvalidVersionError as e:
        raise ValueError(str(e)) from e
    return value

  @field_validator("output_format")
  @classmethod
  def _check_format(cls, value: str) -> str:
    if value not in OUTPUT_FORMATS:
      raise ValueError(f"Unknown format: {value}")
    return value

  def to_options(self) -> UpgradeOptions:
    """Build run options from these settings."""
    data = self.model_dump(exclude={"output_format"})
    return UpgradeOptions(**data)
