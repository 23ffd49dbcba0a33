import asyncio
import dataclasses
import json
import signal
import sys

import structlog
from prometheus_client import start_http_server

from callmetheus.cli import parse_args
from callmetheus.collector import Collector
from callmetheus.config import Config
from callmetheus.exceptions import TwilioException, UsageError
from callmetheus.logging import setup_logging
from callmetheus.metrics import MetricsUpdater
from callmetheus.provider.twilio import TwilioProvider

logger = structlog.get_logger()


def _parse_listen_address(addr: "str") -> "tuple[str, int]":
    """
    parses listen address in format ':9186' or '0.0.0.0:9186'.
    """
    if addr.startswith(":"):
        return ("0.0.0.0", int(addr[1:]))

    host, port = addr.rsplit(":", 1)
    return (host, int(port))


async def _fetch_once(provider: "TwilioProvider", config: "Config") -> "int":
    """
    fetches usage a single time and writes one JSON object
    per record to stdout. Returns the process exit code.
    """
    try:
        records = await provider.fetch_usage(config.usage_filter())
    except TwilioException as exc:
        logger.error(
            "usage_rejected",
            status=exc.status,
            code=exc.code,
            message=exc.message,
            more_info=exc.more_info,
        )
        return 1
    except UsageError:
        logger.exception("usage_fetch_error")
        return 1
    finally:
        await provider.close()

    for record in records:
        sys.stdout.write(json.dumps(dataclasses.asdict(record)) + "\n")
    return 0


def main() -> "None":
    config, once = parse_args()
    setup_logging(config.log_level, config.log_format)

    if not config.twilio_enabled:
        raise SystemExit(
            "Twilio is not configured. Set TWILIO_ACCOUNT_SID and "
            "TWILIO_AUTH_TOKEN environment variables."
        )

    provider = TwilioProvider(
        account_sid=config.twilio_account_sid,
        auth_token=config.twilio_auth_token,
        base_url=config.twilio_base_url,
    )

    if once:
        raise SystemExit(asyncio.run(_fetch_once(provider, config)))

    metrics_updater = MetricsUpdater()
    logger.info("provider_enabled", provider=provider.name)

    host, port = _parse_listen_address(config.listen_address)
    start_http_server(port, addr=host)
    logger.info("metrics_server_started", host=host, port=port)

    collector = Collector(
        provider, metrics_updater, config.usage_filter(), config.scrape_interval
    )

    async def _run() -> "None":
        loop = asyncio.get_running_loop()
        # for SIGINT and SIGTERM, signal the collector
        # to stop gracefully
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, collector.stop)

        try:
            await collector.run()
        finally:
            logger.info("shutting_down")
            await collector.close()
            logger.info("shutdown_complete")

    asyncio.run(_run())


if __name__ == "__main__":
    main()
