"""
Structured logging for the portfolio service.

Alchemy keys travel in the endpoint path (``/v2/<key>``), so httpx errors and
provider failures can echo them. Every record, structlog or stdlib, passes
through ``SecretMasker`` before it is rendered.
"""

import logging
import re
import sys
from typing import Iterable, Optional

import structlog

from .config import Settings, settings as default_settings

MASK = "***"

_ALCHEMY_KEY_IN_URL = re.compile(r"(\.g\.alchemy\.com/v2/)[^/\s'\"?#]+")

# Loggers owned by this project follow the configured level
PROJECT_LOGGERS = ("defi_portfolio", "http")

# Third-party loggers held at WARNING unless running at DEBUG
NOISY_LOGGERS = ("httpcore", "httpx")


def mask_alchemy_keys(text: str) -> str:
    """Replace the key segment of any Alchemy endpoint URL in ``text``."""
    return _ALCHEMY_KEY_IN_URL.sub(rf"\1{MASK}", text)


class SecretMasker:
    """structlog processor masking configured API keys in string fields."""

    def __init__(self, secrets: Iterable[str] = ()):
        # Longest first so a key containing another key is masked whole
        self.secrets = sorted({s for s in secrets if s}, key=len, reverse=True)

    @classmethod
    def from_settings(cls, config: Settings) -> "SecretMasker":
        return cls([
            config.alchemy_api_key,
            config.coingecko_api_key,
            *config.alchemy_network_keys.values(),
        ])

    def mask(self, text: str) -> str:
        text = mask_alchemy_keys(text)
        for secret in self.secrets:
            text = text.replace(secret, MASK)
        return text

    def __call__(self, logger, method_name, event_dict):
        for key, value in event_dict.items():
            if isinstance(value, str):
                event_dict[key] = self.mask(value)
        return event_dict


def setup_logging(config: Optional[Settings] = None, log_level: Optional[str] = None) -> None:
    """Configure structlog and route stdlib logging through it.

    Args:
        config: Settings supplying the level and the keys to mask
            (default: the process settings)
        log_level: Overrides ``config.log_level``

    DEBUG renders human-readable console output; any other level renders
    one JSON object per line.
    """
    config = config or default_settings
    level = getattr(logging, (log_level or config.log_level).upper(), logging.INFO)
    is_dev = level == logging.DEBUG

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if is_dev:
        renderer = structlog.dev.ConsoleRenderer()
    else:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()

    # Runs after format_exc_info so rendered tracebacks are masked too
    shared_processors.append(SecretMasker.from_settings(config))

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in PROJECT_LOGGERS:
        logging.getLogger(name).setLevel(level)

    third_party_level = logging.DEBUG if is_dev else max(level, logging.WARNING)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)

    # Access lines duplicate RequestLoggingMiddleware's http_request event
    logging.getLogger("uvicorn.access").setLevel(max(level, logging.WARNING))
