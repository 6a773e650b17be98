"""CLI interface using Typer."""

import logging
import os
import traceback
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from upshift import __version__
from upshift.config import Settings, load_config
from upshift.core import analyze, upgrade
from upshift.detect import is_rails_app
from upshift.files import FileWriteError
from upshift.models import UpgradeResult
from upshift.output import get_formatter

app = typer.Typer(
  name="upshift",
  help="Pattern-based upgrade assistant for Rails applications",
  no_args_is_help=False,
)

console = Console()

# Flags that enable a behavior; a flag left off keeps the config file's value
_ENABLING_FLAGS = (
  "dry_run",
  "verbose",
  "update_gems",
  "update_configs",
  "update_migrations",
  "update_job_namespaces",
  "update_api_module",
  "update_stock_jobs",
  "update_order_jobs",
  "update_pos_status_jobs",
)


def _is_debug() -> bool:
  return os.environ.get("UPSHIFT_DEBUG", "").lower() in ("1", "true", "yes")


def _setup_logging(verbose: bool) -> None:
  logger = logging.getLogger("upshift")
  for handler in list(logger.handlers):
    if isinstance(handler, RichHandler):
      logger.removeHandler(handler)
  logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False))
  logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def version_callback(value: bool) -> None:
  if value:
    console.print(f"upshift {__version__}")
    raise typer.Exit()


def _merge_settings(settings: Settings, flags: dict, unsafe: bool, target: str | None,
                    format_type: str | None) -> Settings:
  """Overlay command-line flags on file settings, validating the result."""
  data = settings.model_dump()
  for name in _ENABLING_FLAGS:
    if flags[name]:
      data[name] = True
  if unsafe:
    data["safe_mode"] = False
  if target:
    data["target_version"] = target
  if format_type:
    data["output_format"] = format_type
  return Settings(**data)


@app.command()
def main(
  path: Path = typer.Argument(Path("."), help="Rails application root"),
  analyze_only: bool = typer.Option(
    False, "--analyze", "-a", help="Only report issues, do not change files"
  ),
  dry_run: bool = typer.Option(False, "--dry-run", "-d", help="Show what would change"),
  unsafe: bool = typer.Option(False, "--unsafe", help="Also apply rewrites flagged unsafe"),
  verbose: bool = typer.Option(False, "--verbose", "-V", help="Log every applied fix"),
  target: str = typer.Option(None, "--target", "-t", help="Target Rails version (e.g. 7.0.0)"),
  update_gems: bool = typer.Option(False, "--update-gems", "-g", help="Update the Gemfile"),
  update_configs: bool = typer.Option(
    False, "--update-configs", "-c", help="Update config/ files"
  ),
  update_migrations: bool = typer.Option(
    False, "--update-migrations", help="Version migrations for the target release"
  ),
  update_job_namespaces: bool = typer.Option(
    False, "--update-job-namespaces", "-j", help="Apply every namespace update"
  ),
  update_api_module: bool = typer.Option(
    False, "--update-api-module", help="Rename the API module to Api"
  ),
  update_stock_jobs: bool = typer.Option(
    False, "--update-stock-jobs", help="Move inventory stock jobs under Sidekiq::Stock"
  ),
  update_order_jobs: bool = typer.Option(
    False, "--update-order-jobs", help="Move order jobs under Sidekiq::Orders"
  ),
  update_pos_status_jobs: bool = typer.Option(
    False, "--update-pos-status-jobs", help="Move CheckJob to Sidekiq::PosStatus::Check"
  ),
  config: Path = typer.Option(None, "--config", help="Config file path"),
  format_type: str = typer.Option(
    None, "--format", help="Output format: terminal, json, markdown"
  ),
  debug: bool = typer.Option(False, "--debug", help="Show full traceback on errors"),
  version: bool = typer.Option(None, "--version", "-v", callback=version_callback, is_eager=True),
) -> None:
  """Find deprecated Rails patterns and rewrite what can be fixed.

  With no options, scans the current directory and applies safe rewrites.
  """
  show_traceback = debug or _is_debug()

  if not path.is_dir():
    console.print(f"[red]Error:[/red] {path} is not a directory")
    raise typer.Exit(1)
  if not is_rails_app(path):
    console.print(f"[red]Error:[/red] {path} does not appear to be a Rails application")
    raise typer.Exit(1)

  try:
    flags = {
      "dry_run": dry_run,
      "verbose": verbose,
      "update_gems": update_gems,
      "update_configs": update_configs,
      "update_migrations": update_migrations,
      "update_job_namespaces": update_job_namespaces,
      "update_api_module": update_api_module,
      "update_stock_jobs": update_stock_jobs,
      "update_order_jobs": update_order_jobs,
      "update_pos_status_jobs": update_pos_status_jobs,
    }
    settings = _merge_settings(load_config(config, cwd=path), flags, unsafe, target, format_type)
    _setup_logging(settings.verbose)
    formatter = get_formatter(settings.output_format)

    if analyze_only:
      records = analyze(path, settings.target_version)
      result = UpgradeResult(records=records, unresolved=records)
    else:
      result = upgrade(path, settings.to_options())

    output = formatter.format(result, analyze_only=analyze_only)
    if output:
      console.print(output, markup=False, highlight=False, soft_wrap=True)

  except FileNotFoundError as e:
    console.print(f"[red]Error:[/red] {e}")
    raise typer.Exit(1) from None
  except ValidationError as e:
    console.print(f"[red]Error:[/red] Invalid configuration: {e}")
    raise typer.Exit(1) from None
  except FileWriteError as e:
    console.print(f"[red]Error:[/red] {e}")
    raise typer.Exit(1) from None
  except Exception as e:
    console.print(f"[red]Error:[/red] {e}")
    if show_traceback:
      console.print("\n[dim]Traceback:[/dim]")
      console.print(traceback.format_exc())
    raise typer.Exit(1) from None


if __name__ == "__main__":
  app()
