"""Main CLI entry point for mpp-pipeline.

Provides command group with global options and subcommands for running
complementarity and coevolution scenarios.
"""

import logging
from pathlib import Path

import click

from mpp_pipeline import __version__
from mpp_pipeline.config.loader import load_config
from mpp_pipeline.cli.run_cmd import run


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


@click.group()
@click.option(
    '--config',
    type=click.Path(exists=True, path_type=Path),
    default='config/default.yaml',
    help='Path to pipeline configuration YAML file'
)
@click.option(
    '--verbose',
    is_flag=True,
    help='Enable verbose logging (DEBUG level)'
)
@click.pass_context
def cli(ctx, config, verbose):
    """mpp-pipeline: Complementarity of gene function prediction methods.

    Compares which GO functions and gene families two or more classifiers
    predict correctly, and builds similarity networks of gene families from
    two profile representations.
    """
    # Set up context
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config
    ctx.obj['verbose'] = verbose

    # Set logging level
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.debug("Verbose logging enabled")


@cli.command()
@click.pass_context
def info(ctx):
    """Display pipeline information and configuration summary."""
    config_path = ctx.obj['config_path']

    click.echo(f"MPP Pipeline v{__version__}")
    click.echo(f"Config: {config_path}")
    click.echo()

    try:
        config = load_config(config_path)

        # Display config hash
        config_hash = config.config_hash()
        click.echo(f"Config Hash: {config_hash[:16]}...")
        click.echo()

        # Display paths
        click.echo(click.style("Paths:", bold=True))
        click.echo(f"  Data Directory: {config.data_dir}")
        click.echo(f"  Output Directory: {config.output_dir}")
        click.echo()

        click.echo(click.style("Scenarios:", bold=True))
        click.echo(f"  Configured: {len(config.scenarios)}")

    except Exception as e:
        click.echo(click.style(f"Error loading config: {e}", fg='red'), err=True)
        ctx.exit(1)


@cli.command('list')
@click.pass_context
def list_scenarios(ctx):
    """List configured scenarios with their kind."""
    config_path = ctx.obj['config_path']

    try:
        config = load_config(config_path)
    except Exception as e:
        click.echo(click.style(f"Error loading config: {e}", fg='red'), err=True)
        ctx.exit(1)

    if not config.scenarios:
        click.echo("No scenarios configured.")
        return

    for scenario in config.scenarios:
        click.echo(f"{scenario.name}\t{scenario.kind}")


# Register commands
cli.add_command(run)


if __name__ == '__main__':
    cli()
