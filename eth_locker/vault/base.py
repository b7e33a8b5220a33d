"""Underlying vault interface.

The locker does not do share accounting itself. It consumes a yield-bearing
vault through :py:class:`UnderlyingVault`, which can be

- :py:class:`eth_locker.vault.simulated.SimulatedVault` for tests and simulations

- :py:class:`eth_locker.vault.onchain.OnchainVault` for a deployed Yearn V3 vault

All amounts are raw integers in the token's smallest unit.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from eth_typing import HexAddress


@dataclass(frozen=True, slots=True)
class StrategyParams:
    """Vault's bookkeeping for one strategy.

    - Same fields as Yearn V3 `strategies(address)`
    """

    #: When the strategy was added, UNIX seconds
    activation: int

    #: When the strategy last reported, UNIX seconds
    last_report: int

    #: Assets the vault has lent to the strategy
    current_debt: int

    def is_active(self) -> bool:
        return self.activation != 0


@dataclass(frozen=True, slots=True)
class ProtocolFeeConfig:
    """Protocol level cut of the fees, set by the vault factory."""

    #: Share of the fee shares taken by the protocol
    fee_bps: int

    recipient: HexAddress


class VaultHooks(ABC):
    """Callbacks a vault makes into the locker.

    - Implemented by :py:class:`eth_locker.locker.vault.LockedVault`
    """

    @abstractmethod
    def available_withdraw_limit(self, owner: HexAddress) -> int:
        """How many assets `owner` may withdraw right now."""

    @abstractmethod
    def after_redeem(self, owner: HexAddress, shares: int):
        """Called after every successful redemption."""

    @abstractmethod
    def check_transfer(self, sender: HexAddress, to: HexAddress, amount: int, balance: int):
        """Called before any balance reducing share transfer.

        :raise eth_locker.errors.CooldownSharesLocked:
            If the transfer is not allowed
        """


class UnderlyingVault(ABC):
    """The yield-bearing vault behind the locker."""

    @property
    @abstractmethod
    def address(self) -> HexAddress:
        """Vault address, also the share token address."""

    @abstractmethod
    def balance_of(self, account: HexAddress) -> int:
        """Share balance of an account."""

    @abstractmethod
    def convert_to_assets(self, shares: int) -> int:
        pass

    @abstractmethod
    def convert_to_shares(self, assets: int) -> int:
        pass

    @abstractmethod
    def deposit(self, assets: int, receiver: HexAddress, sender: HexAddress) -> int:
        """Deposit assets from `sender`, mint shares to `receiver`.

        :return:
            Shares minted
        """

    @abstractmethod
    def redeem(self, shares: int, receiver: HexAddress, owner: HexAddress, sender: HexAddress) -> int:
        """Burn `owner` shares and send the assets to `receiver`.

        :return:
            Assets paid out
        """

    @abstractmethod
    def transfer(self, sender: HexAddress, to: HexAddress, shares: int):
        """Move shares between accounts."""

    @abstractmethod
    def is_shutdown(self) -> bool:
        pass

    @abstractmethod
    def fetch_strategy_params(self, strategy: HexAddress) -> StrategyParams:
        pass

    @abstractmethod
    def fetch_protocol_fee_config(self) -> ProtocolFeeConfig:
        pass

    def install_hooks(self, hooks: VaultHooks) -> bool:
        """Ask the vault to call the locker hooks.

        :return:
            True if the vault will call the hooks on every redeem and transfer.
            False if the caller must enforce them itself.
        """
        return False
