"""CLI entry point for prmemory.

Commands:
  sync    : summarize merged PRs and append them to a Notion page
  export  : write the LLM payload JSON for each merged PR to disk
  publish : create one Notion page per summary file in a directory
  history : list PRs recorded in the local cache
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.logging import RichHandler

from prmemory_cli.commands.export import export_cmd
from prmemory_cli.commands.history import history_cmd
from prmemory_cli.commands.publish import publish_cmd
from prmemory_cli.commands.sync import sync_cmd


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False, rich_tracebacks=verbose)],
        force=True,
    )
    # urllib3/github debug output drowns the pipeline's own progress lines.
    for noisy in ("urllib3", "github"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


@click.group()
@click.version_option(
    version=importlib.metadata.version("prmemory"),
    prog_name="prmemory",
)
@click.option(
    "--config",
    "config_path",
    default=".prmemory.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRMEMORY_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Summarize your merged GitHub pull requests into Notion."""
    from prmemory_core.config import load_config

    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config"] = load_config(config_path)


main.add_command(sync_cmd)
main.add_command(export_cmd)
main.add_command(publish_cmd)
main.add_command(history_cmd)
