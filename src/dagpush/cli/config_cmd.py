"""
dagpush.cli.config_cmd — dagpush config command.

  dagpush config
  dagpush config --config dagpush.yaml
"""

import sys
import click


@click.command("config")
@click.option("-c", "--config", "config_file", default=None,
              type=click.Path(dir_okay=False),
              help="YAML settings file")
def config_cmd(config_file):
    """Show the settings a publish would use."""
    from dagpush.config import load_settings
    from dagpush.errors import ConfigError

    try:
        settings = load_settings(config_file=config_file)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    reg = settings.registry
    rows = [
        ("registry", reg.address),
        ("username", reg.username or "-"),
        ("password", "****" if reg.password else "-"),
        ("credentials", "yes" if reg.has_credentials() else "no"),
        ("image", settings.image.ref()),
        ("target", settings.image.full_ref(reg.address)),
        ("strategy", settings.strategy_name),
        ("base image", settings.build.base_image),
        ("entrypoint", " ".join(settings.build.entrypoint)),
    ]
    for key, value in rows:
        click.echo(f"{key:12s} {value}")
