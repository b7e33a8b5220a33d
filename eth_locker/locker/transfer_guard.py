"""Keep cooldown-reserved shares from being transferred away."""

from eth_typing import HexAddress

from eth_locker.errors import CooldownSharesLocked
from eth_locker.locker.cooldown import CooldownLedger
from eth_locker.utils import is_zero_address


class TransferGuard:
    """Checks share transfers against the cooldown ledger.

    - Mints and burns are always allowed
    - Accounts without an active cooldown are unrestricted
    """

    def __init__(self, ledger: CooldownLedger):
        self.ledger = ledger

    def get_transferable_amount(self, account: HexAddress, balance: int) -> int:
        return max(0, balance - self.ledger.get_locked_shares(account))

    def can_transfer(self, sender: HexAddress, to: HexAddress, amount: int, balance: int) -> bool:
        if is_zero_address(sender) or is_zero_address(to):
            return True
        return amount <= self.get_transferable_amount(sender, balance)

    def check_transfer(self, sender: HexAddress, to: HexAddress, amount: int, balance: int):
        """:raise CooldownSharesLocked: If the transfer would dip into reserved shares"""
        if not self.can_transfer(sender, to, amount, balance):
            locked = self.ledger.get_locked_shares(sender)
            raise CooldownSharesLocked(f"{sender} has {balance} shares of which {locked} are in cooldown, cannot transfer {amount}")
