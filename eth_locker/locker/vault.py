"""Cooldown locked vault.

:py:class:`LockedVault` is the locking layer in front of an :py:class:`eth_locker.vault.base.UnderlyingVault`.
It owns all locker state and acts as

- the withdrawal gate: holders must declare a cooldown, wait it out and redeem inside the window

- the vault's accountant: strategy reports are priced by :py:class:`eth_locker.locker.accountant.FeeAccrualEngine`

- the vault's hooks: withdraw limit, post redeem bookkeeping and share transfer checks

Example:

.. code-block:: python

    clock = ManualClock()
    vault = SimulatedVault(vault_address, clock)
    locker = LockedVault(
        vault,
        address=locker_address,
        roles=Roles(management=management, performance_fee_recipient=treasury),
        clock=clock,
    )
    vault.set_accountant(locker)

    locker.start_cooldown(1_000, sender=alice)
    clock.time_travel(locker.cooldown_duration)
    locker.redeem(1_000, receiver=alice, owner=alice, sender=alice)
"""

import logging

from eth_typing import HexAddress

from eth_locker.clock import Clock
from eth_locker.config import LockerConfig, validate_cooldown_duration, validate_withdrawal_window
from eth_locker.constants import UNLIMITED
from eth_locker.errors import Unauthorized, WithdrawalNotEligible
from eth_locker.events import (
    CooldownCancelled,
    CooldownDurationUpdated,
    CooldownStarted,
    FeesUpdated,
    HealthCheckUpdated,
    WithdrawalWindowUpdated,
)
from eth_locker.locker.accountant import FeeAccrualEngine
from eth_locker.locker.cooldown import CooldownLedger, CooldownStatus
from eth_locker.locker.health_check import HealthCheckGuard
from eth_locker.locker.transfer_guard import TransferGuard
from eth_locker.roles import Roles
from eth_locker.utils import normalise_address, require_non_zero_address
from eth_locker.vault.base import UnderlyingVault, VaultHooks
from eth_locker.vault.fee import FeeConfig

logger = logging.getLogger(__name__)


class LockedVault(VaultHooks):
    """Withdrawal gating and fee accrual over an underlying vault.

    :param vault:
        The vault whose shares are gated

    :param address:
        Locker's own account. Fee shares are minted here.

    :param roles:
        Management and the performance fee recipient

    :param clock:
        Time source for cooldowns and reports

    :param config:
        Initial settings, defaults if not given
    """

    def __init__(
        self,
        vault: UnderlyingVault,
        address: HexAddress | str,
        roles: Roles,
        clock: Clock,
        config: LockerConfig | None = None,
    ):
        if config is None:
            config = LockerConfig()
        config.validate()

        self.vault = vault
        self.address = require_non_zero_address(address, "locker")
        self.roles = roles
        self.clock = clock

        #: Everything that happened, oldest first
        self.events = []

        self.ledger = CooldownLedger(config.cooldown_duration, config.withdrawal_window)
        self.transfer_guard = TransferGuard(self.ledger)
        self.health_check = HealthCheckGuard(
            profit_limit_bps=config.profit_limit_bps,
            loss_limit_bps=config.loss_limit_bps,
            enabled=config.health_check_enabled,
        )
        self.fee_engine = FeeAccrualEngine(
            vault=vault,
            address=self.address,
            roles=roles,
            fee_config=config.get_fee_config(),
            health_check=self.health_check,
            fee_share_math=config.fee_share_math,
            events=self.events,
        )

        #: Whether the vault calls our hooks or we have to enforce them ourselves
        self.hooks_installed = vault.install_hooks(self)
        if not self.hooks_installed:
            logger.info("Vault %s does not call locker hooks, gating redeem and transfer in the locker", vault.address)

    def __repr__(self):
        return f"<LockedVault {self.address} over {self.vault.address} pending fee shares:{self.pending_fee_shares}>"

    @property
    def cooldown_duration(self) -> int:
        return self.ledger.cooldown_duration

    @property
    def withdrawal_window(self) -> int:
        return self.ledger.withdrawal_window

    @property
    def fee_config(self) -> FeeConfig:
        return self.fee_engine.fee_config

    @property
    def pending_fee_shares(self) -> int:
        return self.fee_engine.pending_fee_shares

    def is_shutdown(self) -> bool:
        return self.vault.is_shutdown()

    #
    # Cooldowns
    #

    def start_cooldown(self, shares: int, sender: HexAddress | str) -> CooldownStatus:
        """Declare shares for withdrawal.

        Replaces any earlier declaration of the sender and restarts both deadlines.

        :return:
            The new cooldown status
        """
        sender = normalise_address(sender)
        balance = self.vault.balance_of(sender)
        now = self.clock.now()
        self.ledger.start_cooldown(sender, shares, balance, now)
        self.events.append(CooldownStarted(account=sender, shares=shares, timestamp=now))
        return self.ledger.get_status(sender)

    def cancel_cooldown(self, sender: HexAddress | str):
        """:raise NoActiveCooldown: Sender has not declared anything"""
        sender = normalise_address(sender)
        self.ledger.cancel_cooldown(sender)
        self.events.append(CooldownCancelled(account=sender, timestamp=self.clock.now()))

    def get_cooldown_status(self, account: HexAddress | str) -> CooldownStatus:
        return self.ledger.get_status(account)

    def withdrawable_amount(self, account: HexAddress | str) -> int:
        """Assets the account could withdraw right now.

        :return:
            Asset amount, or :py:data:`eth_locker.constants.UNLIMITED`
            if the cooldown is disabled or the vault is shut down
        """
        shares = self.ledger.withdrawable_shares(account, self.clock.now(), shutdown=self.is_shutdown())
        if shares == UNLIMITED:
            return UNLIMITED
        if shares == 0:
            return 0
        return self.vault.convert_to_assets(shares)

    def max_redeem(self, account: HexAddress | str) -> int:
        """Shares the account could redeem right now."""
        balance = self.vault.balance_of(account)
        shares = self.ledger.withdrawable_shares(account, self.clock.now(), shutdown=self.is_shutdown())
        return min(balance, shares)

    #
    # Vault hooks
    #

    def available_withdraw_limit(self, owner: HexAddress) -> int:
        return self.withdrawable_amount(owner)

    def after_redeem(self, owner: HexAddress, shares: int):
        self.ledger.on_withdraw(owner, shares)

    def check_transfer(self, sender: HexAddress, to: HexAddress, amount: int, balance: int):
        self.transfer_guard.check_transfer(sender, to, amount, balance)

    #
    # Vault operations
    #

    def deposit(self, assets: int, receiver: HexAddress | str, sender: HexAddress | str) -> int:
        """Deposit into the underlying vault. Deposits are never gated.

        :return:
            Shares minted
        """
        return self.vault.deposit(assets, receiver, sender)

    def redeem(self, shares: int, receiver: HexAddress | str, owner: HexAddress | str, sender: HexAddress | str) -> int:
        """Redeem cooled down shares.

        :return:
            Assets paid out

        :raise WithdrawalNotEligible:
            Outside of the withdrawal window, or more than was declared
        """
        if self.hooks_installed:
            return self.vault.redeem(shares, receiver, owner, sender)

        owner = normalise_address(owner)
        assets = self.vault.convert_to_assets(shares)
        limit = self.available_withdraw_limit(owner)
        if assets > limit:
            raise WithdrawalNotEligible(f"{owner} can withdraw {limit} assets now, tried {assets}")

        assets = self.vault.redeem(shares, receiver, owner, sender)
        self.after_redeem(owner, shares)
        return assets

    def transfer(self, to: HexAddress | str, amount: int, sender: HexAddress | str):
        """Move vault shares, never the ones reserved by a cooldown.

        :raise CooldownSharesLocked:
            Transfer would dip into the declared shares
        """
        sender = normalise_address(sender)
        to = require_non_zero_address(to, "receiver")
        if not self.hooks_installed:
            self.check_transfer(sender, to, amount, self.vault.balance_of(sender))
        self.vault.transfer(sender, to, amount)

    #
    # Fees
    #

    def report(self, strategy: HexAddress | str, gain: int, loss: int, sender: HexAddress | str) -> tuple[int, int]:
        """Accountant entry point called by the vault on every strategy report.

        :return:
            Tuple (total fees in assets, refunds)

        :raise Unauthorized:
            Not called by the vault
        """
        if normalise_address(sender) != self.vault.address:
            raise Unauthorized(f"Only vault {self.vault.address} can report, got {sender}")
        return self.fee_engine.report(normalise_address(strategy), gain, loss, self.clock.now())

    def withdraw_fees(self, sender: HexAddress | str, receiver: HexAddress | str | None = None) -> int:
        """Pay out fee shares that could not be paid at report time.

        :return:
            Shares paid
        """
        self.roles.require_management_or_recipient(sender)
        return self.fee_engine.withdraw_fees(receiver)

    #
    # Management
    #

    def set_cooldown_duration(self, cooldown_duration: int, sender: HexAddress | str):
        """Change the cooldown for new declarations. Zero disables the withdrawal gate."""
        self.roles.require_management(sender)
        validate_cooldown_duration(cooldown_duration)
        self.ledger.cooldown_duration = cooldown_duration
        self.events.append(CooldownDurationUpdated(cooldown_duration=cooldown_duration))
        logger.info("Cooldown duration set to %d seconds", cooldown_duration)

    def set_withdrawal_window(self, withdrawal_window: int, sender: HexAddress | str):
        self.roles.require_management(sender)
        validate_withdrawal_window(withdrawal_window)
        self.ledger.withdrawal_window = withdrawal_window
        self.events.append(WithdrawalWindowUpdated(withdrawal_window=withdrawal_window))
        logger.info("Withdrawal window set to %d seconds", withdrawal_window)

    def set_fees(self, management_fee_bps: int, performance_fee_bps: int, locker_bonus_bps: int, sender: HexAddress | str):
        """:raise ConfigurationInvalid: Fees out of range, old fees are kept"""
        self.roles.require_management(sender)
        fee_config = FeeConfig(
            management_fee_bps=management_fee_bps,
            performance_fee_bps=performance_fee_bps,
            locker_bonus_bps=locker_bonus_bps,
        )
        self.fee_engine.fee_config = fee_config
        self.events.append(
            FeesUpdated(
                management_fee_bps=management_fee_bps,
                performance_fee_bps=performance_fee_bps,
                locker_bonus_bps=locker_bonus_bps,
            )
        )
        logger.info("Fees set to %s", fee_config)

    def set_health_check(self, enabled: bool, sender: HexAddress | str):
        self.roles.require_management(sender)
        self.health_check.enabled = enabled
        self._emit_health_check_updated()

    def set_profit_limit_ratio(self, profit_limit_bps: int, sender: HexAddress | str):
        self.roles.require_management(sender)
        self.health_check.set_profit_limit_ratio(profit_limit_bps)
        self._emit_health_check_updated()

    def set_loss_limit_ratio(self, loss_limit_bps: int, sender: HexAddress | str):
        self.roles.require_management(sender)
        self.health_check.set_loss_limit_ratio(loss_limit_bps)
        self._emit_health_check_updated()

    def set_management(self, new_management: HexAddress | str, sender: HexAddress | str):
        self.roles.set_management(new_management, sender)

    def set_performance_fee_recipient(self, recipient: HexAddress | str, sender: HexAddress | str):
        self.roles.set_performance_fee_recipient(recipient, sender)

    def _emit_health_check_updated(self):
        guard = self.health_check
        self.events.append(
            HealthCheckUpdated(
                enabled=guard.enabled,
                profit_limit_bps=guard.profit_limit_bps,
                loss_limit_bps=guard.loss_limit_bps,
            )
        )
        logger.info("Health check updated: %s", guard)
