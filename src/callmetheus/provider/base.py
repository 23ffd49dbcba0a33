from typing import Protocol, Sequence

from callmetheus.models import UsageFilter, UsageRecord


class UsageProvider(Protocol):
    """
    UsageProvider is the protocol the collector relies on.

    Providers fetch every usage record matching a filter and
    raise a UsageError subclass when the fetch fails.
    """

    @property
    def name(self) -> "str": ...

    async def fetch_usage(
        self,
        usage_filter: "UsageFilter",
        timeout: "float | None" = None,
    ) -> "Sequence[UsageRecord]": ...

    async def close(self) -> "None": ...
