# === FILE: site_mirror/cli.py ===
#!/usr/bin/env python3
"""
Command line entry point for SiteMirror.

Commands:
  crawl     Crawl one host and save every reached page to disk
  config    Show the effective configuration

Common options:
  --config PATH       YAML/JSON config file (optional)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Append log records to this file as well as stdout
  --log-format FORMAT Logging format string

crawl options (override the config file):
  --host URL          Seed URL, e.g. https://www.example.com
  --timeout SEC       Lifetime of the crawl in seconds
  --pages N           Number of pages to save before stopping
  --workers N         Number of worker threads
  --output-dir DIR    Root directory for saved pages
  --retries N         Retries after a network failure

At least one of --timeout / --pages must be set.

Example:
  site-mirror --log-file crawl.log crawl --host https://example.com --pages 100
"""
import json
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from site_mirror import __version__
from site_mirror.config import load_config
from site_mirror.crawler.coordinator import Coordinator
from site_mirror.logger import DEFAULT_FORMAT, init_logging, start_banner

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])


def print_error(message: str):
    click.secho(message, fg="red", err=True)
    sys.exit(1)


def _describe(exc: Exception) -> str:
    if isinstance(exc, ValidationError):
        return "; ".join(err["msg"] for err in exc.errors())
    return str(exc)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, "--version", "-v", message="SiteMirror, version %(version)s")
@click.option(
    "--config", "-c", "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to a YAML/JSON configuration file.",
)
@click.option(
    "--log-level", "log_level",
    default="INFO", show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Logging level",
)
@click.option(
    "--log-file", "log_file",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Append logs to this file (stdout only if not set)",
)
@click.option(
    "--log-format", "log_format",
    default=DEFAULT_FORMAT,
    show_default=True,
    help="Logging format string",
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """SiteMirror: crawl a single host and save its pages."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format,
    )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@cli.command("crawl", context_settings=CONTEXT_SETTINGS)
@click.option("--host", "host", default=None, help="The url to scrape.")
@click.option(
    "--timeout", "timeout", type=int, default=None,
    help="Lifetime of this process (in seconds). At least one constraint needs to be set.",
)
@click.option(
    "--pages", "page_limit", type=int, default=None,
    help="Limit of pages to visit. At least one constraint needs to be set.",
)
@click.option("--workers", "-w", "workers", type=int, default=None, help="Number of worker threads.")
@click.option(
    "--output-dir", "-o", "output_dir",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Root directory for saved pages.",
)
@click.option("--retries", "retry_times", type=int, default=None, help="Retries after a network failure.")
@click.pass_context
def crawl(ctx, host, timeout, page_limit, workers, output_dir, retry_times):
    """Crawl HOST and save every reached page."""
    overrides = {
        "host": host,
        "timeout": timeout,
        "page_limit": page_limit,
        "workers": workers,
        "output_dir": output_dir,
        "retry_times": retry_times,
    }
    try:
        cfg = load_config(ctx.obj["config_path"], overrides)
    except (ValidationError, ValueError, TypeError, OSError) as e:
        print_error(f"Invalid flags: {_describe(e)}")

    start_banner()
    stats = Coordinator(cfg).run()
    click.echo(
        f"Stopped ({stats.stop_reason}): {stats.pages_saved} page(s) saved to {cfg.output_dir}, "
        f"{stats.claimed} visited, {stats.fetch_failures} fetch failure(s) in {stats.elapsed:.1f}s"
    )


@cli.command("config", context_settings=CONTEXT_SETTINGS)
@click.option("--host", "host", default=None, help="Seed URL override.")
@click.option("--timeout", "timeout", type=int, default=None)
@click.option("--pages", "page_limit", type=int, default=None)
@click.pass_context
def show_config(ctx, host, timeout, page_limit):
    """Show the effective configuration as JSON."""
    try:
        cfg = load_config(
            ctx.obj["config_path"],
            {"host": host, "timeout": timeout, "page_limit": page_limit},
        )
    except (ValidationError, ValueError, TypeError, OSError) as e:
        print_error(f"Invalid configuration: {_describe(e)}")
    click.echo(json.dumps(cfg.model_dump(mode="json"), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    cli()
