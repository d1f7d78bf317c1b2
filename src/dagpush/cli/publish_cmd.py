"""
dagpush.cli.publish_cmd — dagpush publish command.

  dagpush publish
  dagpush publish --name hello --tag v1 --registry registry.example.com
  dagpush publish --strategy daemon
  dagpush publish --config dagpush.yaml
"""

import sys
import click


@click.command("publish")
@click.option("-c", "--config", "config_file", default=None,
              type=click.Path(dir_okay=False),
              help="YAML settings file")
@click.option("--registry", "-r", default=None, help="Registry address override")
@click.option("--name", "-n", default=None, help="Image name override")
@click.option("--tag", "-t", default=None, help="Image tag override")
@click.option("--strategy", "-s", default=None,
              type=click.Choice(["engine", "daemon"], case_sensitive=False),
              help="Push through the engine or a local Docker daemon")
def publish_cmd(config_file, registry, name, tag, strategy):
    """Build the image and push it to the registry."""
    from dagpush.config import load_settings
    from dagpush.errors import PublishError
    from dagpush.publish.runner import publish

    overrides = {"address": registry, "name": name, "tag": tag}
    if strategy is not None:
        overrides["use_dagger"] = "true" if strategy.lower() == "engine" else "false"

    try:
        settings = load_settings(config_file=config_file, overrides=overrides)

        click.echo(
            f"Publishing {settings.image} to {settings.registry.address} "
            f"({settings.strategy_name})...",
            err=True,
        )
        outcome = publish(settings)
        click.echo(f"✓ Pushed to {outcome.published_ref}", err=True)

    except PublishError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(outcome.published_ref)
