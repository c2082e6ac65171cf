"""Runtime settings read from the environment.

Values come from process environment variables, optionally seeded from a
``.env`` file in the working directory via ``python-dotenv``:

- ``HEADLINE_CLASSIFIER_LANGUAGE``: stop-word / stemmer language (``english``).
- ``HEADLINE_CLASSIFIER_STEMMER``: stemmer name (``snowball``).
- ``HEADLINE_CLASSIFIER_WORKERS``: training threads (``1``).
- ``HEADLINE_CLASSIFIER_LOG_LEVEL``: CLI log level (``WARNING``).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigurationError

ENV_PREFIX = "HEADLINE_CLASSIFIER_"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    """Defaults shared by the CLI and the high-level classifier."""

    language: str = "english"
    stemmer: str = "snowball"
    workers: int = 1
    log_level: str = "WARNING"

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        dotenv: bool = True,
    ) -> "Settings":
        """Build settings from environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``.
            dotenv: Load a ``.env`` file first (ignored when ``environ`` is given).

        Raises:
            ConfigurationError: If WORKERS is not a positive integer or
                LOG_LEVEL is not a standard level name.
        """
        if environ is None:
            if dotenv:
                load_dotenv(find_dotenv(usecwd=True))
            environ = os.environ

        def _get(name: str, default: str) -> str:
            value = environ.get(ENV_PREFIX + name, "").strip()
            return value or default

        raw_workers = _get("WORKERS", str(cls.workers))
        try:
            workers = int(raw_workers)
        except ValueError as exc:
            raise ConfigurationError(
                f"{ENV_PREFIX}WORKERS must be an integer, got {raw_workers!r}"
            ) from exc
        if workers < 1:
            raise ConfigurationError(f"{ENV_PREFIX}WORKERS must be at least 1, got {workers}")

        log_level = _get("LOG_LEVEL", cls.log_level).upper()
        if log_level not in LOG_LEVELS:
            raise ConfigurationError(
                f"{ENV_PREFIX}LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}"
            )

        return cls(
            language=_get("LANGUAGE", cls.language).lower(),
            stemmer=_get("STEMMER", cls.stemmer).lower(),
            workers=workers,
            log_level=log_level,
        )
