"""Deployed Yearn V3 vault adapter.

- Reads go through `eth_call`
- Writes are sent with `transact()` from the given sender, which must be
  an account the connected node can sign for, like an Anvil test account
- Does not call the locker hooks, the onchain vault has its own modules.
  :py:class:`eth_locker.locker.vault.LockedVault` enforces the withdrawal
  gate itself when used with this adapter.

More information:

- `Vault contract on Github <https://github.com/yearn/yearn-vaults-v3/blob/master/contracts/VaultV3.vy>`__
"""

import logging
from functools import cached_property

from eth_typing import HexAddress
from hexbytes import HexBytes
from web3 import Web3
from web3.contract import Contract
from web3.contract.contract import ContractFunction

from eth_locker.abi import get_deployed_contract
from eth_locker.errors import VaultTransactionFailed
from eth_locker.utils import normalise_address
from eth_locker.vault.base import ProtocolFeeConfig, StrategyParams, UnderlyingVault

logger = logging.getLogger(__name__)


class OnchainVault(UnderlyingVault):
    """Yearn V3 vault read and written over JSON-RPC.

    Example:

    .. code-block:: python

        web3 = Web3(Web3.HTTPProvider(read_json_rpc_url()))
        vault = OnchainVault(web3, "0x9fa306b1f4a6a83fec98d8ebbabedff78c407f6b")
        params = vault.fetch_strategy_params(strategy)
        print(f"Strategy debt is {params.current_debt}")
    """

    def __init__(self, web3: Web3, address: HexAddress | str, receipt_timeout: float = 120.0):
        self.web3 = web3
        self._address = normalise_address(address)
        self.receipt_timeout = receipt_timeout

    def __repr__(self):
        return f"<OnchainVault {self._address}>"

    @property
    def address(self) -> HexAddress:
        return self._address

    @cached_property
    def vault_contract(self) -> Contract:
        return get_deployed_contract(self.web3, "YearnV3Vault.json", self._address)

    @cached_property
    def factory_contract(self) -> Contract:
        factory_address = self.vault_contract.functions.factory().call()
        return get_deployed_contract(self.web3, "YearnV3Factory.json", factory_address)

    def _transact(self, func: ContractFunction, sender: HexAddress) -> HexBytes:
        tx_hash = func.transact({"from": Web3.to_checksum_address(sender)})
        receipt = self.web3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout)
        if receipt["status"] != 1:
            raise VaultTransactionFailed(f"Vault {self._address} transaction {tx_hash.hex()} reverted")
        return tx_hash

    def balance_of(self, account: HexAddress) -> int:
        return self.vault_contract.functions.balanceOf(Web3.to_checksum_address(account)).call()

    def convert_to_assets(self, shares: int) -> int:
        return self.vault_contract.functions.convertToAssets(shares).call()

    def convert_to_shares(self, assets: int) -> int:
        return self.vault_contract.functions.convertToShares(assets).call()

    def is_shutdown(self) -> bool:
        return self.vault_contract.functions.isShutdown().call()

    def fetch_strategy_params(self, strategy: HexAddress) -> StrategyParams:
        activation, last_report, current_debt, _max_debt = self.vault_contract.functions.strategies(Web3.to_checksum_address(strategy)).call()
        return StrategyParams(activation=activation, last_report=last_report, current_debt=current_debt)

    def fetch_protocol_fee_config(self) -> ProtocolFeeConfig:
        fee_bps, recipient = self.factory_contract.functions.protocol_fee_config().call()
        return ProtocolFeeConfig(fee_bps=fee_bps, recipient=normalise_address(recipient))

    def deposit(self, assets: int, receiver: HexAddress, sender: HexAddress) -> int:
        shares = self.vault_contract.functions.previewDeposit(assets).call()
        func = self.vault_contract.functions.deposit(assets, Web3.to_checksum_address(receiver))
        tx_hash = self._transact(func, sender)
        logger.info("Deposited %d assets to %s for ~%d shares, tx %s", assets, self._address, shares, tx_hash.hex())
        return shares

    def redeem(self, shares: int, receiver: HexAddress, owner: HexAddress, sender: HexAddress) -> int:
        assets = self.vault_contract.functions.previewRedeem(shares).call()
        func = self.vault_contract.functions.redeem(shares, Web3.to_checksum_address(receiver), Web3.to_checksum_address(owner))
        tx_hash = self._transact(func, sender)
        logger.info("Redeemed %d shares from %s for ~%d assets, tx %s", shares, self._address, assets, tx_hash.hex())
        return assets

    def transfer(self, sender: HexAddress, to: HexAddress, shares: int):
        func = self.vault_contract.functions.transfer(Web3.to_checksum_address(to), shares)
        self._transact(func, sender)
