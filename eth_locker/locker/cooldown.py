"""Per-account cooldown bookkeeping.

Lifecycle of a withdrawal:

1. Holder declares shares for withdrawal with :py:meth:`CooldownLedger.start_cooldown`
2. Shares stay locked until `cooldown_end`
3. Between `cooldown_end` and `window_end` (both inclusive) the declared shares can be redeemed
4. After `window_end` the declaration lapses. The record stays in place and the shares stay
   reserved until the holder cancels or declares again.

Declaring again always resets both deadlines, even in the middle of an open window.
"""

import logging
from dataclasses import dataclass
from typing import NamedTuple

from eth_typing import HexAddress

from eth_locker.constants import UNLIMITED
from eth_locker.errors import InsufficientBalance, InvalidInput, NoActiveCooldown
from eth_locker.lower_case_dict import AddressDict
from eth_locker.utils import require_non_zero_address

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CooldownRecord:
    """One account's withdrawal declaration."""

    #: Redemption opens at this UNIX timestamp
    cooldown_end: int

    #: Redemption closes after this UNIX timestamp
    window_end: int

    #: Shares declared for withdrawal
    locked_shares: int

    def is_active(self) -> bool:
        return self.locked_shares > 0

    def is_withdrawable(self, now: int) -> bool:
        return self.is_active() and self.cooldown_end <= now <= self.window_end

    def has_lapsed(self, now: int) -> bool:
        return self.is_active() and now > self.window_end


class CooldownStatus(NamedTuple):
    """Public view of a cooldown record, zeroes if there is none."""

    cooldown_end: int
    window_end: int
    shares: int


class CooldownLedger:
    """Cooldown records for all accounts.

    - Does not know about balances or share prices,
      the caller passes the balance in and converts shares to assets

    :param cooldown_duration:
        Seconds between declaration and redemption opening. Zero disables the gate.

    :param withdrawal_window:
        Seconds the redemption stays open
    """

    def __init__(self, cooldown_duration: int, withdrawal_window: int):
        self.cooldown_duration = cooldown_duration
        self.withdrawal_window = withdrawal_window
        self.records: AddressDict = AddressDict()

    def __repr__(self):
        return f"<CooldownLedger cooldown:{self.cooldown_duration}s window:{self.withdrawal_window}s records:{len(self.records)}>"

    def is_enabled(self) -> bool:
        return self.cooldown_duration > 0

    def get_record(self, account: HexAddress) -> CooldownRecord | None:
        """Get the active record, if any."""
        record = self.records.get(account)
        if record is None or not record.is_active():
            return None
        return record

    def get_locked_shares(self, account: HexAddress) -> int:
        record = self.get_record(account)
        return record.locked_shares if record else 0

    def get_status(self, account: HexAddress) -> CooldownStatus:
        record = self.get_record(account)
        if record is None:
            return CooldownStatus(0, 0, 0)
        return CooldownStatus(record.cooldown_end, record.window_end, record.locked_shares)

    def start_cooldown(self, account: HexAddress, shares: int, balance: int, now: int) -> CooldownRecord:
        """Declare shares for withdrawal.

        Any earlier record is replaced, including its progress.

        :param balance:
            Current share balance of the account

        :raise InvalidInput:
            Zero shares or zero address

        :raise InsufficientBalance:
            More shares than the account holds
        """
        account = require_non_zero_address(account, "account")
        if shares <= 0:
            raise InvalidInput("Cooldown shares must be greater than zero")
        if shares > balance:
            raise InsufficientBalance(f"{account} holds {balance} shares, tried to declare {shares}")

        cooldown_end = now + self.cooldown_duration
        record = CooldownRecord(
            cooldown_end=cooldown_end,
            window_end=cooldown_end + self.withdrawal_window,
            locked_shares=shares,
        )
        self.records[account] = record
        logger.info("Cooldown started for %s, %d shares, withdrawable %d - %d", account, shares, record.cooldown_end, record.window_end)
        return record

    def cancel_cooldown(self, account: HexAddress):
        """:raise NoActiveCooldown: If there is nothing to cancel"""
        if self.get_record(account) is None:
            raise NoActiveCooldown(f"{account} has no active cooldown")
        del self.records[account]
        logger.info("Cooldown cancelled for %s", account)

    def withdrawable_shares(self, account: HexAddress, now: int, shutdown: bool = False) -> int:
        """How many shares the account may redeem now.

        :param shutdown:
            The vault is shut down and withdrawals are unrestricted

        :return:
            Share count, or :py:data:`eth_locker.constants.UNLIMITED`
        """
        if not self.is_enabled() or shutdown:
            return UNLIMITED

        record = self.get_record(account)
        if record is None:
            return 0

        if not record.is_withdrawable(now):
            return 0

        return record.locked_shares

    def on_withdraw(self, account: HexAddress, shares_redeemed: int):
        """Shrink or clear the record after a redemption."""
        record = self.get_record(account)
        if record is None:
            return

        if shares_redeemed >= record.locked_shares:
            del self.records[account]
            logger.info("Cooldown of %s fully withdrawn", account)
        else:
            record.locked_shares -= shares_redeemed
            logger.info("Cooldown of %s has %d shares left", account, record.locked_shares)
