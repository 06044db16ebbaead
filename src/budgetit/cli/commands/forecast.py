"""Forecast occurrence command."""

import click
from budgetit.cli.error_handling import handle_domain_error
from budgetit.domain.forecast import DEFAULT_HORIZON_MONTHS, ForecastService


@click.command("forecast")
@click.argument("scenario_id")
@click.option(
    "--horizon",
    type=click.IntRange(min=1),
    default=DEFAULT_HORIZON_MONTHS,
    show_default=True,
    help="Months to expand past each line's anchor date",
)
@click.pass_context
def forecast(ctx, scenario_id: str, horizon: int):
    """Materialize forecast occurrences for a scenario."""
    db = ctx.obj["db"]
    service = ForecastService(db)

    try:
        created = service.materialize_scenario_occurrences(scenario_id, horizon_months=horizon)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Materialized {created} occurrences for scenario '{scenario_id}'")


def register_commands(cli):
    """Register forecast command with main CLI."""
    cli.add_command(forecast)
