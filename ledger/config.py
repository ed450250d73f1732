"""Runtime configuration for the ledger core and its dashboard.

Values come from environment variables (optionally through a local ``.env``
file) so the reporting defaults can be changed without touching the code.
"""
from __future__ import annotations

from dataclasses import dataclass
from os import getenv
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from ledger.periods import RANGE_POLICIES, YEAR_TO_DATE

load_dotenv()

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class LedgerConfig:
    """Settings shared by the report service and the dashboard.

    Attributes:
        locale: Babel locale identifier used by the formatters.
        default_currency: ISO-4217 code used when a wallet has no currency.
        range_policy: How an unspecified reporting range is filled in,
            ``year_to_date`` (January 1 of the current year up to today) or
            ``all_time`` (no bound).
        max_category_depth: Longest parent chain accepted before the
            hierarchy is reported as corrupt.
        log_level: Name of the logging level for the dashboard process.
        seed_file: JSON snapshot loaded by the dashboard on start.
    """

    locale: str = "en_US"
    default_currency: str = "RUB"
    range_policy: str = YEAR_TO_DATE
    max_category_depth: int = 64
    log_level: str = "INFO"
    seed_file: Path = Path("data/seed.json")


def load_config() -> LedgerConfig:
    """Create a :class:`LedgerConfig` from the environment.

    Unset variables fall back to the dataclass defaults. Malformed values
    raise ``ValueError`` instead of being silently ignored.
    """

    defaults = LedgerConfig()

    range_policy = env_setting("LEDGER_RANGE_POLICY", defaults.range_policy)
    if range_policy not in RANGE_POLICIES:
        raise ValueError(
            f"LEDGER_RANGE_POLICY must be one of {RANGE_POLICIES}, got {range_policy!r}"
        )

    raw_depth = env_setting("LEDGER_MAX_CATEGORY_DEPTH", str(defaults.max_category_depth))
    try:
        max_depth = int(raw_depth)
    except ValueError:
        raise ValueError(f"LEDGER_MAX_CATEGORY_DEPTH must be an integer, got {raw_depth!r}") from None
    if max_depth < 1:
        raise ValueError("LEDGER_MAX_CATEGORY_DEPTH must be positive")

    log_level = env_setting("LEDGER_LOG_LEVEL", defaults.log_level).upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(f"LEDGER_LOG_LEVEL must be one of {LOG_LEVELS}, got {log_level!r}")

    return LedgerConfig(
        locale=env_setting("LEDGER_LOCALE", defaults.locale),
        default_currency=env_setting("LEDGER_DEFAULT_CURRENCY", defaults.default_currency).upper(),
        range_policy=range_policy,
        max_category_depth=max_depth,
        log_level=log_level,
        seed_file=Path(env_setting("LEDGER_SEED_FILE", defaults.seed_file)),
    )


def env_setting(name: str, fallback: object = None) -> Optional[str]:
    # blank values count as unset
    raw = (getenv(name) or "").strip()
    if raw:
        return raw
    return None if fallback is None else str(fallback)
