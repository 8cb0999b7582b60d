"""Logging setup for stdlib logging and structlog.

Service modules log through ``logging.getLogger(__name__)``; adapters and
the HTTP layer use ``structlog.get_logger()`` with keyword context. Both
end up on the same stdlib handlers once configure_logging() has run.
"""

import logging

import structlog

_VISIBLE_DIGITS = 4


def configure_logging(level: str = "INFO", *, json_output: bool = False) -> None:
    """Configure stdlib logging and route structlog through it.

    Args:
        level: Log level name (e.g., "INFO", "DEBUG").
        json_output: Render structlog events as JSON (production) instead of
            the key/value console format.
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def mask_destination(destination: str) -> str:
    """Mask a phone number or email address for logs and notifications.

    Keeps the last four characters of a phone number and the first character
    plus domain of an email address.

    Args:
        destination: Raw contact value.

    Returns:
        Masked string such as ``***1234`` or ``j***@example.com``.
    """
    value = destination.strip()
    if "@" in value:
        local, _, domain = value.partition("@")
        return f"{local[:1]}***@{domain}"
    if len(value) <= _VISIBLE_DIGITS:
        return "*" * len(value)
    return f"***{value[-_VISIBLE_DIGITS:]}"
