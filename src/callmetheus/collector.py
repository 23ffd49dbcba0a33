import asyncio
import time

import structlog

from callmetheus.exceptions import TwilioException
from callmetheus.metrics import MetricsUpdater
from callmetheus.models import UsageFilter
from callmetheus.provider.base import UsageProvider

logger = structlog.get_logger()


class Collector:
    """
    Collector periodically fetches usage records from a single
    provider and publishes them through the metrics updater.
    Each successful fetch replaces the whole usage snapshot, so
    the collector owns the usage gauges exclusively.
    A failed fetch is logged and counted but leaves the previous
    snapshot in place until the next successful cycle.
    """

    def __init__(
        self,
        provider: "UsageProvider",
        metrics_updater: "MetricsUpdater",
        usage_filter: "UsageFilter",
        scrape_interval_seconds: "int" = 300,
    ) -> "None":
        self._provider = provider
        self._metrics = metrics_updater
        self._filter = usage_filter
        self._interval = scrape_interval_seconds
        self._stop_event: "asyncio.Event" = asyncio.Event()

    def stop(self) -> "None":
        """
        signals the collector loop to stop after the current cycle.
        """
        self._stop_event.set()

    async def close(self) -> "None":
        """
        closes the provider session.
        """
        await self._provider.close()

    async def run(self) -> "None":
        """
        runs the main collection loop. Runs until stop() is called.
        """
        while not self._stop_event.is_set():
            logger.info("collection_cycle_start", category=self._filter.category)

            await self._collect()
            logger.info("collection_cycle_end")

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval)
            except TimeoutError:
                pass

    async def _collect(self) -> "None":
        provider = self._provider
        cycle_start = time.monotonic()

        # a fetch never outlives its own cycle
        try:
            records = await provider.fetch_usage(self._filter, timeout=self._interval)
        except TwilioException as exc:
            logger.error(
                "usage_rejected",
                provider=provider.name,
                status=exc.status,
                code=exc.code,
                message=exc.message,
            )
            self._metrics.inc_scrape_error(provider.name, "provider")
            return
        except Exception:
            logger.exception("usage_fetch_error", provider=provider.name)
            self._metrics.inc_scrape_error(provider.name, "transport")
            return
        finally:
            self._metrics.observe_scrape_duration(
                provider.name, time.monotonic() - cycle_start
            )

        self._metrics.replace_usage(records)
        self._metrics.set_last_scrape_success(provider.name, time.time())
        logger.info(
            "usage_collected", provider=provider.name, record_count=len(records)
        )
