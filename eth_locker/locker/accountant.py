"""Fee accrual on strategy reports.

The vault calls the accountant on every strategy report. The accountant prices
the fees in vault assets and tells the vault the total, which the vault then mints
as shares to the accountant. The management and performance part of those shares
belongs to the performance fee recipient. The locker bonus part stays with the locker.

Fees for a report with gain `G`, debt `D` and `T` seconds since the last report:

- management fee: `D * T * management_fee_bps / 10000 / SECONDS_PER_YEAR`
- performance fee: `G * performance_fee_bps / 10000`
- locker bonus: `G * locker_bonus_bps / 10000`

If the sum exceeds the gain, the total is capped to the gain and the management fee
absorbs the difference. Reports without a gain never charge anything.
"""

import logging

from eth_typing import HexAddress

from eth_locker.constants import MAX_BPS, SECONDS_PER_YEAR
from eth_locker.errors import DuplicateReport, InvalidInput
from eth_locker.events import FeesReported, FeesWithdrawn
from eth_locker.locker.health_check import HealthCheckGuard
from eth_locker.roles import Roles
from eth_locker.utils import require_non_zero_address
from eth_locker.vault.base import UnderlyingVault
from eth_locker.vault.fee import ZERO_FEES, FeeBreakdown, FeeConfig, FeeShareMath

logger = logging.getLogger(__name__)


def calculate_fees(fee_config: FeeConfig, gain: int, elapsed: int, principal: int) -> FeeBreakdown:
    """Price the fees for one report.

    :param gain:
        Reported profit in vault assets

    :param elapsed:
        Seconds since the strategy last reported

    :param principal:
        Strategy debt before this report
    """
    if gain == 0:
        return ZERO_FEES

    management_fee = 0
    if fee_config.management_fee_bps > 0:
        management_fee = principal * elapsed * fee_config.management_fee_bps // MAX_BPS // SECONDS_PER_YEAR

    performance_fee = gain * fee_config.performance_fee_bps // MAX_BPS
    locker_bonus = gain * fee_config.locker_bonus_bps // MAX_BPS

    if management_fee + performance_fee + locker_bonus > gain:
        management_fee = gain - (performance_fee + locker_bonus)

    return FeeBreakdown(
        management_fee=management_fee,
        performance_fee=performance_fee,
        locker_bonus=locker_bonus,
    )


def calculate_recipient_shares(shares: int, fees: FeeBreakdown, fee_share_math: FeeShareMath) -> int:
    """Part of the fee shares owed to the performance fee recipient."""
    total_fees = fees.total_fees
    if total_fees == 0:
        return 0

    match fee_share_math:
        case FeeShareMath.multiply_first:
            return shares * fees.recipient_fees // total_fees
        case FeeShareMath.divide_first:
            return shares * (fees.recipient_fees // total_fees)
        case _:
            raise NotImplementedError(f"Unknown fee share math: {fee_share_math}")


class FeeAccrualEngine:
    """Turns strategy reports into fee shares.

    :param address:
        Account that receives the minted fee shares from the vault

    :param events:
        Event list shared with the owning locker
    """

    def __init__(
        self,
        vault: UnderlyingVault,
        address: HexAddress,
        roles: Roles,
        fee_config: FeeConfig,
        health_check: HealthCheckGuard,
        fee_share_math: FeeShareMath = FeeShareMath.multiply_first,
        events: list | None = None,
    ):
        self.vault = vault
        self.address = address
        self.roles = roles
        self.fee_config = fee_config
        self.health_check = health_check
        self.fee_share_math = fee_share_math
        self.events = events if events is not None else []

        #: Fee shares owed to the recipient that could not be paid at report time
        self.pending_fee_shares = 0

        if fee_share_math == FeeShareMath.divide_first:
            logger.warning("Fee share math is divide_first: recipient fee shares truncate to zero whenever a locker bonus is charged")

    def report(self, strategy: HexAddress, gain: int, loss: int, now: int) -> tuple[int, int]:
        """Charge fees for one strategy report.

        :return:
            Tuple (total fees in assets, refunds). Refunds are always zero.

        :raise DuplicateReport:
            Strategy already reported at this timestamp

        :raise HealthCheckFailed:
            Gain or loss out of bounds
        """
        if gain < 0 or loss < 0:
            raise InvalidInput(f"Negative gain {gain} or loss {loss}")

        params = self.vault.fetch_strategy_params(strategy)
        elapsed = now - params.last_report
        if elapsed == 0:
            raise DuplicateReport(f"Strategy {strategy} already reported at {now}")

        self.health_check.check(gain, loss, params.current_debt)
        result = self._charge_fees(strategy, gain, loss, elapsed, params.current_debt)
        self.health_check.arm()
        return result

    def _charge_fees(self, strategy: HexAddress, gain: int, loss: int, elapsed: int, principal: int) -> tuple[int, int]:
        if gain == 0:
            logger.info("Strategy %s reported %d loss, no fees", strategy, loss)
            return 0, 0

        fees = calculate_fees(self.fee_config, gain, elapsed, principal)
        if fees.is_zero():
            return 0, 0

        total_fees = fees.total_fees
        shares = self.vault.convert_to_shares(total_fees)

        protocol_fee = self.vault.fetch_protocol_fee_config()
        if protocol_fee.fee_bps > 0:
            shares -= shares * protocol_fee.fee_bps // MAX_BPS

        fee_shares = calculate_recipient_shares(shares, fees, self.fee_share_math)

        paid_out = False
        if fee_shares > 0:
            if self.vault.balance_of(self.address) >= fee_shares:
                self.vault.transfer(self.address, self.roles.performance_fee_recipient, fee_shares)
                paid_out = True
            else:
                self.pending_fee_shares += fee_shares

        self.events.append(
            FeesReported(
                strategy=strategy,
                gain=gain,
                loss=loss,
                management_fee=fees.management_fee,
                performance_fee=fees.performance_fee,
                locker_bonus=fees.locker_bonus,
                total_fees=total_fees,
                fee_shares=fee_shares,
                paid_out=paid_out,
            )
        )

        logger.info(
            "Strategy %s gain %d, fees %d (management %d, performance %d, locker %d), %d fee shares %s, pending now %d",
            strategy,
            gain,
            total_fees,
            fees.management_fee,
            fees.performance_fee,
            fees.locker_bonus,
            fee_shares,
            "paid" if paid_out else "queued",
            self.pending_fee_shares,
        )
        return total_fees, 0

    def withdraw_fees(self, receiver: HexAddress | None = None) -> int:
        """Pay out the pending fee shares.

        :param receiver:
            Defaults to the performance fee recipient

        :return:
            Shares paid

        :raise InvalidInput:
            Nothing pending
        """
        if receiver is None:
            receiver = self.roles.performance_fee_recipient
        receiver = require_non_zero_address(receiver, "receiver")

        shares = self.pending_fee_shares
        if shares == 0:
            raise InvalidInput("No pending fee shares")

        self.vault.transfer(self.address, receiver, shares)
        self.pending_fee_shares = 0
        self.events.append(FeesWithdrawn(receiver=receiver, shares=shares))
        logger.info("Withdrew %d pending fee shares to %s", shares, receiver)
        return shares
