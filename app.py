"""
Hotel Forecasting - Command Line Tool

Runs the forecasting engine over ledger CSV exports:
1. History: bucket bookings, revenue, expenses and KPI snapshots into metric series
2. Forecasting: four models combined into a weighted ensemble
3. Storage: ensemble points upserted into a forecast CSV used for caching and validation
"""

import logging
import traceback

import click
import pandas as pd
from tqdm import tqdm

from hotelcast import CsvForecastStore, ForecastConfig, ForecastingError, ForecastOrchestrator, LedgerHistoryProvider
from hotelcast.types import METRIC_TYPES, PERIODS

# Set up logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

data_dir_option = click.option(
    "--data-dir",
    "-d",
    type=click.Path(exists=True, file_okay=False),
    default="data",
    show_default=True,
    help="Directory holding bookings.csv, revenue.csv, expenses.csv and kpis.csv",
)
store_option = click.option(
    "--store",
    "-s",
    type=click.Path(dir_okay=False),
    default="forecasts.csv",
    show_default=True,
    help="Forecast store CSV",
)
period_option = click.option(
    "--period",
    "-p",
    type=click.Choice(PERIODS, case_sensitive=False),
    default="monthly",
    show_default=True,
)


def _build_orchestrator(data_dir: str, store: str, sequential: bool = False) -> ForecastOrchestrator:
    config = ForecastConfig(parallel_models=not sequential)
    return ForecastOrchestrator(
        history_provider=LedgerHistoryProvider.from_csv_dir(data_dir),
        store=CsvForecastStore(store),
        config=config,
    )


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Forecast hotel business metrics from historical ledgers."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


@cli.command()
@click.option("--type", "-t", "metric_type", type=click.Choice(METRIC_TYPES), default="booking_demand", show_default=True)
@period_option
@click.option("--horizon", "-h", type=click.IntRange(min=1), default=6, show_default=True)
@click.option("--sequential", is_flag=True, help="Evaluate models one after another")
@data_dir_option
@store_option
def forecast(metric_type: str, period: str, horizon: int, sequential: bool, data_dir: str, store: str) -> None:
    """Generate (or reuse) an ensemble forecast for one metric."""
    orchestrator = _build_orchestrator(data_dir, store, sequential)
    try:
        report = orchestrator.generate_forecast(metric_type, period, horizon)
    except ForecastingError as e:
        raise click.ClickException(str(e))

    frame = report.to_frame()[["id", "forecast_date", "predicted_value", "lower_bound", "upper_bound", "confidence"]]
    click.echo(f"{metric_type} ({period}) - {'cached' if report.cached else 'generated'} at {report.generated_at}")
    click.echo(frame.to_string(index=False, float_format=lambda value: f"{value:,.2f}"))

    overall = report.accuracy.get("overall")
    if overall is not None:
        click.echo(f"Recent accuracy: {overall:.1f}% over {report.accuracy['sample_size']} validated forecasts")
    click.echo(f"Next update: {report.next_update}")


@cli.command("forecast-all")
@period_option
@click.option("--horizon", "-h", type=click.IntRange(min=1), default=6, show_default=True)
@data_dir_option
@store_option
def forecast_all(period: str, horizon: int, data_dir: str, store: str) -> None:
    """Generate forecasts for every metric type."""
    orchestrator = _build_orchestrator(data_dir, store)

    summary = []
    skipped = 0
    for metric_type in tqdm(METRIC_TYPES, desc="Generating forecasts"):
        try:
            report = orchestrator.generate_forecast(metric_type, period, horizon)
        except ForecastingError as e:
            logger.warning(f"  Skipping {metric_type}: {e}")
            skipped += 1
            continue

        for record in report.forecasts:
            summary.append({"type": metric_type, "forecast_date": record.forecast_date, "predicted_value": record.predicted_value})

    if summary:
        table = pd.DataFrame(summary).pivot(index="forecast_date", columns="type", values="predicted_value")
        click.echo(table.to_string(float_format=lambda value: f"{value:,.2f}"))
    logger.info(f"Forecasted {len(METRIC_TYPES) - skipped} metrics, skipped {skipped}")


@cli.command()
@click.option("--type", "-t", "metric_type", type=click.Choice(METRIC_TYPES), default="booking_demand", show_default=True)
@period_option
@data_dir_option
@store_option
def seasonality(metric_type: str, period: str, data_dir: str, store: str) -> None:
    """Analyse seasonal patterns of a metric."""
    orchestrator = _build_orchestrator(data_dir, store)
    try:
        trends = orchestrator.get_seasonal_trends(metric_type, period)
    except ForecastingError as e:
        raise click.ClickException(str(e))

    analysis = trends["seasonality"]
    click.echo(f"Pattern: {analysis['pattern']} (amplitude {analysis['seasonality']:.3f})")
    click.echo(f"Peak season: {analysis['peak_season']}  Low season: {analysis['low_season']}")
    click.echo("Indices: " + ", ".join(f"{index:.2f}" for index in analysis["indices"]))
    for recommendation in trends["recommendations"]:
        click.echo(f"[{recommendation['priority']}] {recommendation['type']}: {recommendation['message']}")


@cli.command()
@click.argument("forecast_id")
@click.argument("actual_value", type=float)
@store_option
def validate(forecast_id: str, actual_value: float, store: str) -> None:
    """Record the actual value for a stored forecast."""
    tracker_store = CsvForecastStore(store)
    orchestrator = ForecastOrchestrator(history_provider=LedgerHistoryProvider({}), store=tracker_store)
    try:
        result = orchestrator.update_forecast_accuracy(forecast_id, actual_value)
    except ForecastingError as e:
        raise click.ClickException(str(e))
    click.echo(f"Accuracy score: {result['accuracy_score']:.1f}")


def main() -> None:
    try:
        cli()
    except Exception as e:
        logger.error(f"Forecasting failed: {e}")
        traceback.print_exc()
        raise


if __name__ == "__main__":
    main()
