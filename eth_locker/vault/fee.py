"""Locker fee settings and fee calculation results."""

import enum
from dataclasses import dataclass

from eth_locker.constants import MAX_BPS, MAX_MANAGEMENT_FEE_BPS
from eth_locker.errors import ConfigurationInvalid


class FeeShareMath(enum.Enum):
    """How the recipient's part of the fee shares is derived.

    The recipient gets the management and performance portion of the converted fee shares.
    The locker bonus portion stays with the locker.
    """

    #: `shares * (management + performance) // total`
    #:
    #: Accrues fee shares whenever management or performance fees are non-zero.
    multiply_first = "multiply_first"

    #: `shares * ((management + performance) // total)`
    #:
    #: The inner ratio truncates to zero whenever a locker bonus is charged,
    #: so the recipient accrues nothing while `total_fees` is still reported.
    #: Only for reproducing the historical accrual volume.
    divide_first = "divide_first"


@dataclass(slots=True)
class FeeConfig:
    """Locker fee parameters in basis points."""

    #: Annualised fee on the strategy debt, charged when there is a gain
    management_fee_bps: int = 0

    #: Cut of the reported gain
    performance_fee_bps: int = 0

    #: Cut of the reported gain left with the locker for its holders
    locker_bonus_bps: int = 0

    def __post_init__(self):
        self.validate()

    def validate(self):
        """:raise ConfigurationInvalid: If any of the fees is out of range"""
        for name in ("management_fee_bps", "performance_fee_bps", "locker_bonus_bps"):
            value = getattr(self, name)
            if type(value) != int or value < 0:
                raise ConfigurationInvalid(f"{name} must be a non-negative int, got {value!r}")

        if self.management_fee_bps > MAX_MANAGEMENT_FEE_BPS:
            raise ConfigurationInvalid(f"Management fee {self.management_fee_bps} bps exceeds the {MAX_MANAGEMENT_FEE_BPS} bps cap")

        if self.performance_fee_bps + self.locker_bonus_bps > MAX_BPS:
            raise ConfigurationInvalid(f"Performance fee {self.performance_fee_bps} bps and locker bonus {self.locker_bonus_bps} bps exceed {MAX_BPS} bps")


@dataclass(frozen=True, slots=True)
class FeeBreakdown:
    """Fees for one report, in vault asset units."""

    management_fee: int
    performance_fee: int
    locker_bonus: int

    @property
    def total_fees(self) -> int:
        return self.management_fee + self.performance_fee + self.locker_bonus

    @property
    def recipient_fees(self) -> int:
        """The part paid to the performance fee recipient."""
        return self.management_fee + self.performance_fee

    def is_zero(self) -> bool:
        return self.total_fees == 0


#: Nothing to charge
ZERO_FEES = FeeBreakdown(management_fee=0, performance_fee=0, locker_bonus=0)
