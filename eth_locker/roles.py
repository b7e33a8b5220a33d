"""Role checks for privileged locker operations.

Privileged calls take an explicit `sender` and check it against :py:class:`Roles`.
"""

import logging
from dataclasses import dataclass

from eth_typing import HexAddress

from eth_locker.errors import Unauthorized
from eth_locker.utils import normalise_address, require_non_zero_address

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Roles:
    """Who can manage the locker and who receives the fees."""

    #: Can change fees, cooldown settings and health check bounds
    management: HexAddress

    #: Receives management and performance fee shares
    performance_fee_recipient: HexAddress

    def __post_init__(self):
        self.management = require_non_zero_address(self.management, "management")
        self.performance_fee_recipient = require_non_zero_address(self.performance_fee_recipient, "performance_fee_recipient")

    def is_management(self, sender: HexAddress | str) -> bool:
        return normalise_address(sender) == self.management

    def require_management(self, sender: HexAddress | str):
        """:raise Unauthorized: If sender is not management"""
        if not self.is_management(sender):
            raise Unauthorized(f"{sender} is not management")

    def require_management_or_recipient(self, sender: HexAddress | str):
        """:raise Unauthorized: If sender is neither management nor the fee recipient"""
        sender = normalise_address(sender)
        if sender not in (self.management, self.performance_fee_recipient):
            raise Unauthorized(f"{sender} is neither management nor the performance fee recipient")

    def set_management(self, new_management: HexAddress | str, sender: HexAddress | str):
        self.require_management(sender)
        self.management = require_non_zero_address(new_management, "management")
        logger.info("Management changed to %s", self.management)

    def set_performance_fee_recipient(self, recipient: HexAddress | str, sender: HexAddress | str):
        self.require_management(sender)
        self.performance_fee_recipient = require_non_zero_address(recipient, "performance_fee_recipient")
        logger.info("Performance fee recipient changed to %s", self.performance_fee_recipient)
