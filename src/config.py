"""
Shop configuration read from environment variables.

    SHOP_INITIAL_STOCK            pieces stocked per product at start-up (20)
    SHOP_PAYMENT_DELAY_SECONDS    simulated payment latency (1.0)
    SHOP_PAYMENT_TIMEOUT_SECONDS  give up on a charge after this long (unset: wait forever)
    SHOP_LOG_DIR                  directory for the rotating log file (logs)
    SHOP_LOG_LEVEL                root log level name (INFO)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional


@dataclass
class ShopSettings:
    initial_stock: int = 20
    payment_delay_seconds: float = 1.0
    payment_timeout_seconds: Optional[float] = None
    log_dir: str = "logs"
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.initial_stock < 0:
            raise ValueError("initial_stock must not be negative")
        if self.payment_delay_seconds < 0:
            raise ValueError("payment_delay_seconds must not be negative")
        if self.payment_timeout_seconds is not None and self.payment_timeout_seconds <= 0:
            raise ValueError("payment_timeout_seconds must be positive")
        self.log_level = self.log_level.upper()
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValueError(f"Unknown log level '{self.log_level}'")

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ShopSettings":
        env = os.environ if environ is None else environ
        defaults = cls()

        def _read(name, convert, default):
            raw = env.get(name)
            if raw is None or raw.strip() == "":
                return default
            try:
                return convert(raw.strip())
            except ValueError:
                raise ValueError(f"Invalid value for {name}: {raw!r}") from None

        return cls(
            initial_stock=_read("SHOP_INITIAL_STOCK", int, defaults.initial_stock),
            payment_delay_seconds=_read("SHOP_PAYMENT_DELAY_SECONDS", float, defaults.payment_delay_seconds),
            payment_timeout_seconds=_read("SHOP_PAYMENT_TIMEOUT_SECONDS", float, defaults.payment_timeout_seconds),
            log_dir=_read("SHOP_LOG_DIR", str, defaults.log_dir),
            log_level=_read("SHOP_LOG_LEVEL", str, defaults.log_level),
        )
