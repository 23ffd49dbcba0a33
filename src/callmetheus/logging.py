import logging
import sys

import structlog


def setup_logging(level: "str", fmt: "str" = "console") -> "None":
    """
    configures structlog on top of the stdlib logging module.
    "console" renders human readable lines, "json" emits one
    JSON object per event for log shippers.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    # stdout is reserved for --once output
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=numeric_level,
    )

    renderer: "structlog.typing.Processor"
    if fmt == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # httpx logs every request at INFO, which would leak
    # next-page tokens into the default log stream
    if numeric_level > logging.DEBUG:
        for noisy_logger in ("httpx", "httpcore"):
            logging.getLogger(noisy_logger).setLevel(logging.WARNING)
