import asyncio

import httpx
import structlog

from callmetheus.exceptions import TransportError, TwilioException
from callmetheus.models import UsageFilter, UsagePage, UsageRecord

logger = structlog.get_logger()

TWILIO_BASE_URL = "https://api.twilio.com/2010-04-01"


def resolve_next_page_url(base_url: "str", next_page_uri: "str") -> "str":
    """
    resolves a next_page_uri against the API root.

    Twilio returns next-page links rooted above the versioned base
    URL, e.g. "/2010-04-01/Accounts/AC.../Usage/Records.json?Page=1".
    The link is joined to the base URL with its version segment
    removed, so the segment never appears twice. Links that do not
    start with the version segment are taken as relative to the full
    base URL, and absolute links are returned unchanged.
    """
    if httpx.URL(next_page_uri).is_absolute_url:
        return next_page_uri

    base = base_url.rstrip("/")
    root, _, version = base.rpartition("/")
    link = next_page_uri if next_page_uri.startswith("/") else f"/{next_page_uri}"

    if version and (link == f"/{version}" or link.startswith(f"/{version}/")):
        return root + link

    return base + link


class TwilioProvider:
    """
    TwilioProvider fetches usage records for a single Twilio account,
    following next_page_uri links until the last page. Pages are
    fetched one after another since each page's address is only known
    from the previous response.
    """

    def __init__(
        self,
        account_sid: "str",
        auth_token: "str" = "",
        base_url: "str" = TWILIO_BASE_URL,
        client: "httpx.AsyncClient | None" = None,
    ) -> "None":
        self._account_sid = account_sid
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client: "httpx.AsyncClient" = client or httpx.AsyncClient(
            timeout=10.0,
            auth=(account_sid, auth_token),
            headers={"Accept": "application/json"},
        )

    @property
    def name(self) -> "str":
        return "twilio"

    @property
    def records_url(self) -> "str":
        return f"{self._base_url}/Accounts/{self._account_sid}/Usage/Records.json"

    async def close(self) -> "None":
        """
        closes the underlying HTTP client, unless it was handed in
        by the caller.
        """
        if self._owns_client:
            await self._client.aclose()

    async def get_usage(
        self,
        category: "str" = "",
        start_date: "str" = "",
        end_date: "str" = "",
        include_subaccounts: "bool" = False,
        *,
        timeout: "float | None" = None,
    ) -> "list[UsageRecord]":
        return await self.fetch_usage(
            UsageFilter(
                category=category,
                start_date=start_date,
                end_date=end_date,
                include_subaccounts=include_subaccounts,
            ),
            timeout=timeout,
        )

    async def fetch_usage(
        self,
        usage_filter: "UsageFilter",
        timeout: "float | None" = None,
    ) -> "list[UsageRecord]":
        """
        fetches all usage records matching the filter across every
        page. Raises TwilioException when Twilio rejects a request
        and TransportError on network or decode failures; records
        from earlier pages are discarded in both cases.

        timeout bounds the whole fetch, not a single request.
        """
        async with asyncio.timeout(timeout):
            return await self._fetch_all_pages(usage_filter)

    async def _fetch_all_pages(self, usage_filter: "UsageFilter") -> "list[UsageRecord]":
        records: "list[UsageRecord]" = []
        url = self.records_url
        params: "dict[str, str] | None" = usage_filter.to_params()
        pages = 0

        while True:
            logger.debug("twilio_fetch_usage_page", url=url, page=pages)
            try:
                resp = await self._client.get(url, params=params)
            except httpx.HTTPError as err:
                raise TransportError(f"usage request failed: {err}") from err
            pages += 1

            if resp.status_code != 200:
                exc = TwilioException.from_response(resp)
                logger.warning(
                    "twilio_usage_exception",
                    status=exc.status,
                    code=exc.code,
                    pages_fetched=pages - 1,
                )
                raise exc

            try:
                page = UsagePage.from_dict(resp.json())
            except (ValueError, TypeError, AttributeError) as err:
                raise TransportError(f"invalid usage page: {err}") from err

            records.extend(page.usage_records)

            if not page.next_page_uri:
                break

            # the next page link already carries the filter query
            url = resolve_next_page_url(self._base_url, page.next_page_uri)
            params = None

        logger.debug("twilio_usage_done", pages=pages, record_count=len(records))
        return records
