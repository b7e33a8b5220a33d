"""Locker configuration.

Defaults can be overridden from environment variables:

- `LOCKER_COOLDOWN_DURATION`: seconds, `0` disables the cooldown gate
- `LOCKER_WITHDRAWAL_WINDOW`: seconds, must be more than one day
- `LOCKER_MANAGEMENT_FEE_BPS`, `LOCKER_PERFORMANCE_FEE_BPS`, `LOCKER_BONUS_BPS`
- `LOCKER_PROFIT_LIMIT_BPS`, `LOCKER_LOSS_LIMIT_BPS`
- `LOCKER_HEALTH_CHECK`: `true` or `false`
- `LOCKER_FEE_SHARE_MATH`: `multiply_first` or `divide_first`

Onchain usage reads the node from `JSON_RPC_URL`.
"""

import logging
import os
from dataclasses import dataclass, field

from eth_locker.constants import (
    DEFAULT_COOLDOWN_DURATION,
    DEFAULT_WITHDRAWAL_WINDOW,
    MAX_BPS,
    MIN_WITHDRAWAL_WINDOW,
)
from eth_locker.errors import ConfigurationInvalid
from eth_locker.vault.fee import FeeConfig, FeeShareMath

logger = logging.getLogger(__name__)


def validate_cooldown_duration(seconds: int):
    if type(seconds) != int or seconds < 0:
        raise ConfigurationInvalid(f"Cooldown duration must be a non-negative int, got {seconds!r}")


def validate_withdrawal_window(seconds: int):
    if type(seconds) != int or seconds <= MIN_WITHDRAWAL_WINDOW:
        raise ConfigurationInvalid(f"Withdrawal window must be more than {MIN_WITHDRAWAL_WINDOW} seconds, got {seconds!r}")


@dataclass(slots=True)
class LockerConfig:
    """Initial settings for :py:class:`eth_locker.locker.vault.LockedVault`."""

    cooldown_duration: int = DEFAULT_COOLDOWN_DURATION
    withdrawal_window: int = DEFAULT_WITHDRAWAL_WINDOW

    management_fee_bps: int = 0
    performance_fee_bps: int = 1_000
    locker_bonus_bps: int = 0

    #: Health check bounds relative to strategy debt
    profit_limit_bps: int = MAX_BPS
    loss_limit_bps: int = 0
    health_check_enabled: bool = True

    #: See :py:class:`eth_locker.vault.fee.FeeShareMath`
    fee_share_math: FeeShareMath = field(default=FeeShareMath.multiply_first)

    def __post_init__(self):
        self.validate()

    def validate(self):
        """:raise ConfigurationInvalid: On any out of range setting"""
        validate_cooldown_duration(self.cooldown_duration)
        validate_withdrawal_window(self.withdrawal_window)
        self.get_fee_config()
        if self.profit_limit_bps <= 0:
            raise ConfigurationInvalid("Profit limit must be greater than zero")
        if not 0 <= self.loss_limit_bps < MAX_BPS:
            raise ConfigurationInvalid(f"Loss limit must be in [0, {MAX_BPS}), got {self.loss_limit_bps}")
        if not isinstance(self.fee_share_math, FeeShareMath):
            raise ConfigurationInvalid(f"Unknown fee share math {self.fee_share_math!r}")

    def get_fee_config(self) -> FeeConfig:
        return FeeConfig(
            management_fee_bps=self.management_fee_bps,
            performance_fee_bps=self.performance_fee_bps,
            locker_bonus_bps=self.locker_bonus_bps,
        )

    @classmethod
    def from_env(cls, environ: dict | None = None) -> "LockerConfig":
        """Read settings from `LOCKER_*` environment variables.

        :param environ:
            Use this mapping instead of `os.environ`

        :raise ConfigurationInvalid:
            Malformed or out of range value
        """
        if environ is None:
            environ = os.environ

        def _int(name: str, default: int) -> int:
            value = environ.get(name)
            if value is None or value == "":
                return default
            try:
                return int(value)
            except ValueError as e:
                raise ConfigurationInvalid(f"Environment variable {name} is not an integer: {value}") from e

        health_check = environ.get("LOCKER_HEALTH_CHECK", "true").strip().lower()
        if health_check not in ("true", "false"):
            raise ConfigurationInvalid(f"LOCKER_HEALTH_CHECK must be true or false, got {health_check}")

        fee_share_math = environ.get("LOCKER_FEE_SHARE_MATH", FeeShareMath.multiply_first.value)
        try:
            fee_share_math = FeeShareMath(fee_share_math)
        except ValueError as e:
            raise ConfigurationInvalid(f"Unknown LOCKER_FEE_SHARE_MATH: {fee_share_math}") from e

        config = cls(
            cooldown_duration=_int("LOCKER_COOLDOWN_DURATION", DEFAULT_COOLDOWN_DURATION),
            withdrawal_window=_int("LOCKER_WITHDRAWAL_WINDOW", DEFAULT_WITHDRAWAL_WINDOW),
            management_fee_bps=_int("LOCKER_MANAGEMENT_FEE_BPS", 0),
            performance_fee_bps=_int("LOCKER_PERFORMANCE_FEE_BPS", 1_000),
            locker_bonus_bps=_int("LOCKER_BONUS_BPS", 0),
            profit_limit_bps=_int("LOCKER_PROFIT_LIMIT_BPS", MAX_BPS),
            loss_limit_bps=_int("LOCKER_LOSS_LIMIT_BPS", 0),
            health_check_enabled=health_check == "true",
            fee_share_math=fee_share_math,
        )
        logger.debug("Locker config from environment: %s", config)
        return config


def read_json_rpc_url(environ: dict | None = None) -> str:
    """Read JSON-RPC URL for onchain vault access.

    :raise ValueError: If `JSON_RPC_URL` is not set
    """
    if environ is None:
        environ = os.environ
    json_rpc_url = environ.get("JSON_RPC_URL")
    if not json_rpc_url:
        raise ValueError("Environment variable JSON_RPC_URL is not set")
    return json_rpc_url
