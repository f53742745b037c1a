"""Run command: execute configured scenarios.

Each scenario runs once per threshold. A failing invocation is reported and
the remaining ones still run; the command exits non-zero if any failed.
"""

import logging
import sys
from pathlib import Path

import click

from mpp_pipeline.config.loader import load_config_with_overrides
from mpp_pipeline.output import write_run_summary
from mpp_pipeline.pipeline import ScenarioRunner

logger = logging.getLogger(__name__)


@click.command('run')
@click.option(
    '--scenario',
    'scenarios',
    multiple=True,
    help='Scenario to run (repeatable; default: all configured scenarios)'
)
@click.option(
    '--data-dir',
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help='Override data_dir from config'
)
@click.option(
    '--output-dir',
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help='Override output_dir from config'
)
@click.pass_context
def run(ctx, scenarios, data_dir, output_dir):
    """Run complementarity, network and AUPRC scenarios.

    Examples:

        # Run every configured scenario
        mpp-pipeline run

        # Run two scenarios into a scratch folder
        mpp-pipeline run --scenario fig1 --scenario fig3 --output-dir /tmp/out
    """
    config_path = ctx.obj['config_path']

    click.echo(click.style("=== MPP Complementarity Pipeline ===", bold=True))
    click.echo()

    overrides = {}
    if data_dir is not None:
        overrides['data_dir'] = data_dir
    if output_dir is not None:
        overrides['output_dir'] = output_dir

    # Load config
    click.echo("Loading configuration...")
    try:
        config = load_config_with_overrides(config_path, overrides)
    except Exception as e:
        click.echo(click.style(f"Error loading config: {e}", fg='red'), err=True)
        sys.exit(1)
    click.echo(click.style(f"  Config loaded: {config_path}", fg='green'))
    click.echo()

    runner = ScenarioRunner(config)
    try:
        outcomes = runner.run(list(scenarios) or None)
    except KeyError as e:
        click.echo(click.style(f"Error: {e.args[0]}", fg='red'), err=True)
        sys.exit(1)

    # Summary
    click.echo(click.style("=== Summary ===", bold=True))
    failed = 0
    for outcome in outcomes:
        label = outcome.scenario if outcome.threshold is None else f"{outcome.scenario} @ {outcome.threshold}"
        if outcome.ok:
            click.echo(click.style(f"  OK      {label} ({len(outcome.outputs)} files)", fg='green'))
        else:
            failed += 1
            click.echo(click.style(f"  FAILED  {label}: {outcome.error}", fg='red'))
    click.echo()
    summary_path = write_run_summary(outcomes, config.output_dir / "run_summary.yaml")
    click.echo(f"Output Directory: {config.output_dir}")
    click.echo(f"Run summary: {summary_path}")

    if failed:
        click.echo(click.style(f"{failed} of {len(outcomes)} runs failed", fg='red'), err=True)
        sys.exit(1)

    click.echo(click.style("All runs complete", fg='green'))
