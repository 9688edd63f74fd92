import logging

import structlog

# Third-party loggers that flood DEBUG output with connection chatter
_QUIET_LOGGERS = ("pymongo", "aiohttp.access", "aiohttp.client")

_REDACTED_KEYS = frozenset({"password", "password_hash", "token", "authorization"})


def redact_secrets(_: object, __: str, event_dict: structlog.types.EventDict) -> structlog.types.EventDict:
    """Blank out credential values if a caller ever passes them as log keys."""
    for key in _REDACTED_KEYS & event_dict.keys():
        event_dict[key] = "***"
    return event_dict


def setup_logging(debug: bool) -> None:
    log_level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(level=log_level, format="%(message)s")

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        redact_secrets,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if debug:
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
