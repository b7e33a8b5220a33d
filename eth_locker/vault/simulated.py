"""In-memory Yearn V3 style vault.

- Idle assets plus debt lent out to strategies
- Strategies report profit or loss through :py:meth:`SimulatedVault.process_report`,
  which asks the accountant for fees and mints fee shares
- Calls the locker hooks on every redeem and share transfer

This is a stand-in for the real vault so the locker can be exercised
without a chain. It does not model profit unlocking.
"""

import logging
from typing import Protocol

from eth_typing import HexAddress

from eth_locker.clock import Clock
from eth_locker.constants import MAX_BPS, ZERO_ADDRESS
from eth_locker.errors import InsufficientBalance, InvalidInput, Unauthorized, WithdrawalNotEligible
from eth_locker.lower_case_dict import AddressDict
from eth_locker.utils import normalise_address, require_non_zero_address
from eth_locker.vault.base import ProtocolFeeConfig, StrategyParams, UnderlyingVault, VaultHooks

logger = logging.getLogger(__name__)


class Accountant(Protocol):
    """Whoever prices the fees for a strategy report."""

    address: HexAddress

    def report(self, strategy: HexAddress, gain: int, loss: int, sender: HexAddress) -> tuple[int, int]:
        ...


class SimulatedVault(UnderlyingVault):
    """Multi-strategy vault kept in Python dicts.

    Example:

    .. code-block:: python

        clock = ManualClock()
        vault = SimulatedVault("0x" + "aa" * 20, clock)
        vault.mint_assets(alice, 1_000)
        vault.deposit(1_000, alice, sender=alice)
        vault.add_strategy(strategy)
        vault.update_debt(strategy, 1_000)

        clock.time_travel(86400)
        vault.set_strategy_assets(strategy, 1_100)
        vault.process_report(strategy)
    """

    def __init__(self, address: HexAddress | str, clock: Clock):
        self._address = require_non_zero_address(address, "vault")
        self.clock = clock

        #: Underlying token balances of accounts outside the vault
        self.asset_balances = AddressDict()

        #: Vault share balances
        self.share_balances = AddressDict()

        self.total_supply = 0
        self.total_idle = 0
        self.total_debt = 0

        self.strategies: AddressDict = AddressDict()

        #: What each strategy would report as its total assets
        self.strategy_assets = AddressDict()

        self.shutdown_mode = False
        self.protocol_fee = ProtocolFeeConfig(fee_bps=0, recipient=ZERO_ADDRESS)
        self.accountant: Accountant | None = None
        self.hooks: VaultHooks | None = None

    def __repr__(self):
        return f"<SimulatedVault {self._address} supply:{self.total_supply} assets:{self.total_assets()}>"

    @property
    def address(self) -> HexAddress:
        return self._address

    def total_assets(self) -> int:
        return self.total_idle + self.total_debt

    def balance_of(self, account: HexAddress) -> int:
        return self.share_balances.get(account, 0)

    def convert_to_shares(self, assets: int) -> int:
        total_assets = self.total_assets()
        if self.total_supply == 0 or total_assets == 0:
            return assets
        return assets * self.total_supply // total_assets

    def convert_to_assets(self, shares: int) -> int:
        if self.total_supply == 0:
            return shares
        return shares * self.total_assets() // self.total_supply

    def is_shutdown(self) -> bool:
        return self.shutdown_mode

    def fetch_strategy_params(self, strategy: HexAddress) -> StrategyParams:
        params = self.strategies.get(strategy)
        if params is None:
            raise InvalidInput(f"Strategy {strategy} is not active in {self._address}")
        return params

    def fetch_protocol_fee_config(self) -> ProtocolFeeConfig:
        return self.protocol_fee

    def install_hooks(self, hooks: VaultHooks) -> bool:
        self.hooks = hooks
        return True

    def set_accountant(self, accountant: Accountant):
        self.accountant = accountant

    def set_protocol_fee(self, fee_bps: int, recipient: HexAddress | str):
        assert 0 <= fee_bps <= MAX_BPS, f"Bad protocol fee {fee_bps}"
        self.protocol_fee = ProtocolFeeConfig(fee_bps=fee_bps, recipient=normalise_address(recipient))

    def shutdown(self):
        logger.info("Vault %s shut down", self._address)
        self.shutdown_mode = True

    def mint_assets(self, account: HexAddress, amount: int):
        """Give an account underlying tokens out of thin air."""
        self.asset_balances[account] = self.asset_balances.get(account, 0) + amount

    def _mint(self, to: HexAddress, shares: int):
        self.share_balances[to] = self.share_balances.get(to, 0) + shares
        self.total_supply += shares

    def _burn(self, owner: HexAddress, shares: int):
        self.share_balances[owner] = self.share_balances.get(owner, 0) - shares
        self.total_supply -= shares

    def deposit(self, assets: int, receiver: HexAddress, sender: HexAddress) -> int:
        if assets <= 0:
            raise InvalidInput("Cannot deposit zero assets")
        receiver = require_non_zero_address(receiver, "receiver")
        if self.shutdown_mode:
            raise InvalidInput(f"Vault {self._address} is shut down")
        if self.asset_balances.get(sender, 0) < assets:
            raise InsufficientBalance(f"{sender} has {self.asset_balances.get(sender, 0)} assets, tried to deposit {assets}")

        shares = self.convert_to_shares(assets)
        if shares == 0:
            raise InvalidInput(f"Deposit of {assets} would mint zero shares")

        if self.hooks:
            self.hooks.check_transfer(ZERO_ADDRESS, receiver, shares, 0)

        self.asset_balances[sender] -= assets
        self.total_idle += assets
        self._mint(receiver, shares)
        logger.debug("Deposit %d assets for %d shares to %s", assets, shares, receiver)
        return shares

    def redeem(self, shares: int, receiver: HexAddress, owner: HexAddress, sender: HexAddress) -> int:
        if shares <= 0:
            raise InvalidInput("Cannot redeem zero shares")
        receiver = require_non_zero_address(receiver, "receiver")
        owner = normalise_address(owner)
        if normalise_address(sender) != owner:
            raise Unauthorized(f"{sender} cannot redeem shares of {owner}")

        balance = self.balance_of(owner)
        if shares > balance:
            raise InsufficientBalance(f"{owner} has {balance} shares, tried to redeem {shares}")

        assets = self.convert_to_assets(shares)

        if self.hooks:
            limit = self.hooks.available_withdraw_limit(owner)
            if assets > limit:
                raise WithdrawalNotEligible(f"{owner} can withdraw {limit} assets now, tried {assets}")

        if assets > self.total_idle:
            raise InsufficientBalance(f"Vault has {self.total_idle} idle assets, redemption needs {assets}")

        if self.hooks:
            self.hooks.check_transfer(owner, ZERO_ADDRESS, shares, balance)

        self._burn(owner, shares)
        self.total_idle -= assets
        self.asset_balances[receiver] = self.asset_balances.get(receiver, 0) + assets

        if self.hooks:
            self.hooks.after_redeem(owner, shares)

        logger.debug("Redeem %d shares of %s for %d assets", shares, owner, assets)
        return assets

    def transfer(self, sender: HexAddress, to: HexAddress, shares: int):
        sender = normalise_address(sender)
        to = require_non_zero_address(to, "receiver")
        balance = self.balance_of(sender)

        if self.hooks:
            self.hooks.check_transfer(sender, to, shares, balance)

        if shares > balance:
            raise InsufficientBalance(f"{sender} has {balance} shares, tried to transfer {shares}")

        self.share_balances[sender] = balance - shares
        self.share_balances[to] = self.share_balances.get(to, 0) + shares

    def add_strategy(self, strategy: HexAddress | str):
        strategy = require_non_zero_address(strategy, "strategy")
        if strategy in self.strategies:
            raise InvalidInput(f"Strategy {strategy} already added")
        now = self.clock.now()
        self.strategies[strategy] = StrategyParams(activation=now, last_report=now, current_debt=0)
        self.strategy_assets[strategy] = 0

    def update_debt(self, strategy: HexAddress, target_debt: int):
        """Move idle assets into a strategy or pull them back."""
        params = self.fetch_strategy_params(strategy)
        delta = target_debt - params.current_debt
        if delta > self.total_idle:
            raise InsufficientBalance(f"Vault has {self.total_idle} idle assets, strategy needs {delta}")

        self.total_idle -= delta
        self.total_debt += delta
        self.strategy_assets[strategy] += delta
        self.strategies[strategy] = StrategyParams(params.activation, params.last_report, target_debt)

    def set_strategy_assets(self, strategy: HexAddress, assets: int):
        """Simulate strategy profit or loss before the next report."""
        self.fetch_strategy_params(strategy)
        self.strategy_assets[strategy] = assets

    def process_report(self, strategy: HexAddress) -> tuple[int, int]:
        """Account strategy profit or loss and charge fees.

        - The accountant is called before anything is written,
          so a failed health check leaves the vault untouched

        :return:
            Tuple (gain, loss)
        """
        params = self.fetch_strategy_params(strategy)
        assets = self.strategy_assets[strategy]

        gain = max(0, assets - params.current_debt)
        loss = max(0, params.current_debt - assets)

        total_fees = 0
        if self.accountant is not None:
            total_fees, _refunds = self.accountant.report(strategy, gain, loss, sender=self._address)

        # Fee shares are priced before the gain is added
        fee_shares = self.convert_to_shares(total_fees) if total_fees else 0
        protocol_shares = fee_shares * self.protocol_fee.fee_bps // MAX_BPS

        self.total_debt += assets - params.current_debt
        self.strategies[strategy] = StrategyParams(params.activation, self.clock.now(), assets)

        if protocol_shares:
            self._mint(self.protocol_fee.recipient, protocol_shares)
        if fee_shares - protocol_shares:
            self._mint(self.accountant.address, fee_shares - protocol_shares)

        logger.info("Strategy %s reported gain:%d loss:%d fees:%d fee shares:%d", strategy, gain, loss, total_fees, fee_shares)
        return gain, loss
