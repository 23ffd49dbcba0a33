import argparse

from callmetheus.config import Config


def parse_args(argv: "list[str] | None" = None) -> "tuple[Config, bool]":
    """
    parses command line flags on top of the environment config.
    Returns the config and whether a single fetch was requested.
    """
    parser = argparse.ArgumentParser(
        prog="callmetheus",
        description="Twilio usage records client and Prometheus exporter",
    )
    parser.add_argument(
        "--web.listen-address",
        dest="listen_address",
        default=":9186",
        help="Address to listen on (default: :9186)",
    )
    parser.add_argument(
        "--scrape.interval",
        dest="scrape_interval",
        type=int,
        default=300,
        help="Scrape interval in seconds (default: 300)",
    )
    parser.add_argument(
        "--log.level",
        dest="log_level",
        default="info",
        choices=["debug", "info", "warning", "error"],
        help="Log level (default: info)",
    )
    parser.add_argument(
        "--log.format",
        dest="log_format",
        default="console",
        choices=["console", "json"],
        help="Log output format (default: console)",
    )
    parser.add_argument(
        "--usage.category",
        dest="usage_category",
        default="",
        help="Only fetch this usage category, e.g. sms or calls",
    )
    parser.add_argument(
        "--usage.start-date",
        dest="usage_start_date",
        default="",
        help="Start date as YYYY-MM-DD or offset such as -30days",
    )
    parser.add_argument(
        "--usage.end-date",
        dest="usage_end_date",
        default="",
        help="End date as YYYY-MM-DD or offset such as +0days",
    )
    parser.add_argument(
        "--usage.include-subaccounts",
        dest="usage_include_subaccounts",
        action="store_true",
        help="Include usage of subaccounts",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Fetch usage once, print records as JSON lines and exit",
    )

    args = parser.parse_args(argv)
    config = Config.from_env()
    config.listen_address = args.listen_address
    config.scrape_interval = args.scrape_interval
    config.log_level = args.log_level
    config.log_format = args.log_format
    config.usage_category = args.usage_category
    config.usage_start_date = args.usage_start_date
    config.usage_end_date = args.usage_end_date
    config.usage_include_subaccounts = args.usage_include_subaccounts
    return config, args.once
