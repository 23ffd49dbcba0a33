from typing import Iterable

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, Histogram

from callmetheus.models import UsageRecord


def _to_float(value: "str") -> "float":
    """
    price and usage are decimal strings, empty for categories
    Twilio does not bill.
    """
    try:
        return float(value)
    except ValueError:
        return 0.0


class MetricsUpdater:
    """
    exposes the latest Twilio usage snapshot as gauges, along
    with self-metrics about the scrape cycles.

    Usage records are totals over the configured date range,
    so every successful scrape replaces the previous values
    instead of incrementing them.
    """

    def __init__(self, registry: "CollectorRegistry" = REGISTRY) -> "None":
        self._price: "Gauge" = Gauge(
            "callmetheus_twilio_usage_price",
            "Price of Twilio usage per category over the date range",
            ["account_sid", "category", "price_unit"],
            registry=registry,
        )
        self._count: "Gauge" = Gauge(
            "callmetheus_twilio_usage_count",
            "Number of usage events per category over the date range",
            ["account_sid", "category", "count_unit"],
            registry=registry,
        )
        self._amount: "Gauge" = Gauge(
            "callmetheus_twilio_usage_amount",
            "Amount of usage per category over the date range",
            ["account_sid", "category", "usage_unit"],
            registry=registry,
        )
        self._scrape_duration: "Histogram" = Histogram(
            "callmetheus_scrape_duration_seconds",
            "Duration of provider scrape cycles",
            ["provider"],
            registry=registry,
        )
        self._scrape_errors: "Counter" = Counter(
            "callmetheus_scrape_errors_total",
            "Total number of scrape errors by provider and stage",
            ["provider", "stage"],
            registry=registry,
        )
        self._last_scrape_success: "Gauge" = Gauge(
            "callmetheus_last_scrape_success_timestamp_seconds",
            "Unix timestamp of last successful scrape per provider",
            ["provider"],
            registry=registry,
        )

    def replace_usage(self, records: "Iterable[UsageRecord]") -> "None":
        """
        drops the series of the previous scrape and sets the
        gauges from the given records, so categories that vanish
        from the response vanish from the exposition as well.
        """
        self._price.clear()
        self._count.clear()
        self._amount.clear()

        for record in records:
            self._price.labels(
                account_sid=record.account_sid,
                category=record.category,
                price_unit=record.price_unit,
            ).set(_to_float(record.price))
            self._count.labels(
                account_sid=record.account_sid,
                category=record.category,
                count_unit=record.count_unit,
            ).set(record.count)
            self._amount.labels(
                account_sid=record.account_sid,
                category=record.category,
                usage_unit=record.usage_unit,
            ).set(_to_float(record.usage))

    def observe_scrape_duration(
        self, provider: "str", duration_seconds: "float"
    ) -> "None":
        self._scrape_duration.labels(provider=provider).observe(duration_seconds)

    def inc_scrape_error(self, provider: "str", stage: "str") -> "None":
        self._scrape_errors.labels(provider=provider, stage=stage).inc()

    def set_last_scrape_success(self, provider: "str", timestamp: "float") -> "None":
        self._last_scrape_success.labels(provider=provider).set(timestamp)
