"""Bound the gain or loss a single strategy report can carry."""

import logging

from eth_locker.constants import MAX_BPS
from eth_locker.errors import ConfigurationInvalid, HealthCheckFailed

logger = logging.getLogger(__name__)


class HealthCheckGuard:
    """Gain and loss limits relative to the strategy debt.

    - Checks pass unconditionally until the guard is armed, so a fresh deployment can take in
      the strategy's existing P&L
    - The guard is armed by the first report that has gone through completely
    - A disabled guard never checks and does not arm itself

    :param profit_limit_bps:
        Largest allowed gain as a share of the debt

    :param loss_limit_bps:
        Largest allowed loss as a share of the debt
    """

    def __init__(self, profit_limit_bps: int = MAX_BPS, loss_limit_bps: int = 0, enabled: bool = True):
        self.profit_limit_bps = 0
        self.loss_limit_bps = 0
        self.set_profit_limit_ratio(profit_limit_bps)
        self.set_loss_limit_ratio(loss_limit_bps)
        self.enabled = enabled
        self.armed = False

    def __repr__(self):
        return f"<HealthCheckGuard enabled:{self.enabled} armed:{self.armed} profit:{self.profit_limit_bps} loss:{self.loss_limit_bps}>"

    def set_profit_limit_ratio(self, profit_limit_bps: int):
        if profit_limit_bps <= 0:
            raise ConfigurationInvalid("Profit limit must be greater than zero")
        self.profit_limit_bps = profit_limit_bps

    def set_loss_limit_ratio(self, loss_limit_bps: int):
        if not 0 <= loss_limit_bps < MAX_BPS:
            raise ConfigurationInvalid(f"Loss limit must be in [0, {MAX_BPS}), got {loss_limit_bps}")
        self.loss_limit_bps = loss_limit_bps

    def arm(self):
        """Arm the guard after a successful report. No-op when disabled."""
        if not self.enabled or self.armed:
            return
        logger.info("Health check armed")
        self.armed = True

    def check(self, gain: int, loss: int, principal: int):
        """:raise HealthCheckFailed: If the report is out of bounds"""
        if not self.enabled:
            return

        if not self.armed:
            logger.info("Health check not armed, report of %d gain %d loss passed through", gain, loss)
            return

        if gain > 0:
            limit = principal * self.profit_limit_bps // MAX_BPS
            if gain > limit:
                raise HealthCheckFailed(f"Gain {gain} exceeds limit {limit} on debt {principal}")
        elif loss > 0:
            limit = principal * self.loss_limit_bps // MAX_BPS
            if loss > limit:
                raise HealthCheckFailed(f"Loss {loss} exceeds limit {limit} on debt {principal}")
