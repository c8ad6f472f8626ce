"""Batch jobs that append scraped values to the series store."""

import logging
from datetime import date, datetime, timezone

from oljefond_dashboard.config import Settings
from oljefond_dashboard.data.sources import FetchError, ValueSource
from oljefond_dashboard.data.store import SeriesStore
from oljefond_dashboard.models.series import (
    FundSnapshot,
    FxRecord,
    PerCapitaRecord,
    PopulationRecord,
)


logger = logging.getLogger(__name__)


def collect_fund(
    store: SeriesStore,
    fund_source: ValueSource,
    now: datetime | None = None,
) -> PerCapitaRecord | None:
    """
    Append the current fund value and derive the per-capita value.

    Uses the latest recorded population; the population source is not queried.

    Returns:
        The appended per-capita record, or None if no population exists yet
    """
    ts = now or datetime.now(timezone.utc)

    fund_value = int(fund_source.fetch())
    store.append_fund(FundSnapshot(timestamp=ts, fund_value=fund_value))
    logger.info(f"Fund appended: {ts.isoformat()} {fund_value}")

    population = store.latest_population()
    if population is None:
        logger.warning("No population data yet; skipping per-capita append.")
        return None

    record = PerCapitaRecord.derive(
        timestamp=ts,
        fund_value=fund_value,
        population=population.population,
        population_date=population.date,
    )
    store.append_per_capita(record)
    logger.info(
        f"Per-capita appended: {record.per_capita_value:.0f} NOK "
        f"(pop {record.population} from {population.date})"
    )
    return record


def collect_daily(
    store: SeriesStore,
    population_source: ValueSource,
    fx_source: ValueSource,
    today: date | None = None,
) -> dict[str, bool]:
    """
    Record population and USD/NOK once per UTC calendar date.

    Population failures propagate; an FX failure is logged and skipped.

    Returns:
        Which series got a new row: {"population": bool, "fx": bool}
    """
    today = today or datetime.now(timezone.utc).date()
    appended = {"population": False, "fx": False}

    if store.has_population_for(today):
        logger.info(f"Population for {today} already recorded; skipping.")
    else:
        pop = int(population_source.fetch())
        store.append_population(PopulationRecord(date=today, population=pop))
        appended["population"] = True
        logger.info(f"Population appended: {today} {pop}")

    if store.has_fx_for(today):
        logger.info(f"USDNOK for {today} already recorded; skipping.")
    else:
        try:
            rate = fx_source.fetch()
        except FetchError as e:
            logger.warning(f"USDNOK fetch failed (non-fatal): {e}")
        else:
            store.append_fx(FxRecord(date=today, rate=rate, source=fx_source.name))
            appended["fx"] = True
            logger.info(f"USDNOK appended: {today} {rate}")

    return appended


def main() -> None:
    """CLI entry point for collecting data."""
    import argparse
    import sys

    from oljefond_dashboard.data.fx_fetcher import ExchangeRateSource
    from oljefond_dashboard.data.nbim_fetcher import NbimFundSource
    from oljefond_dashboard.data.ssb_fetcher import SsbPopulationSource

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Scrape NBIM, SSB and USD/NOK into data/")
    parser.add_argument(
        "job",
        choices=["fund", "daily", "all", "status"],
        help="fund: append fund value; daily: population + FX; all: both; status: show series",
    )
    args = parser.parse_args()

    try:
        settings = Settings()
        settings.validate()
        store = SeriesStore(settings.data_dir)

        if args.job == "status":
            print("\nSeries Status:")
            print("-" * 60)
            for name, info in store.get_status().items():
                print(f"{name:24} | {info['count']:6} rows | Last: {info['last'] or 'N/A'}")
            return

        if args.job in ("daily", "all"):
            with SsbPopulationSource(settings) as pop_source, ExchangeRateSource(settings) as fx_source:
                collect_daily(store, pop_source, fx_source)

        if args.job in ("fund", "all"):
            with NbimFundSource(settings) as fund_source:
                collect_fund(store, fund_source)

    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)
    except FetchError as e:
        print(f"Fetch error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
