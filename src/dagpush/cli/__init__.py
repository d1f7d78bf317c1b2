"""
dagpush.cli — CLI entry point.

Commands:
  dagpush publish [flags]   — Build the image and push it
  dagpush config [flags]    — Show resolved settings
"""

import logging
import os

import click

from dagpush import __version__
from dagpush.cli.publish_cmd import publish_cmd
from dagpush.cli.config_cmd import config_cmd


def setup_logging(verbose: bool = False) -> None:
    level = "DEBUG" if verbose else os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@click.group()
@click.version_option(version=__version__, prog_name="dagpush")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
def main(verbose):
    """dagpush — Build a container image and publish it to a registry."""
    setup_logging(verbose)


main.add_command(publish_cmd, "publish")
main.add_command(config_cmd, "config")
