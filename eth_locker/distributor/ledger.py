"""Token balances seen by the fee distributor."""

import logging
from abc import ABC, abstractmethod
from collections import defaultdict

from eth_typing import HexAddress
from web3 import Web3
from web3.contract import Contract

from eth_locker.abi import get_deployed_contract
from eth_locker.errors import InsufficientBalance, InvalidInput, VaultTransactionFailed
from eth_locker.lower_case_dict import AddressDict
from eth_locker.utils import normalise_address, require_non_zero_address

logger = logging.getLogger(__name__)


class TokenLedger(ABC):
    """Read balances and move tokens on behalf of the distributor."""

    @abstractmethod
    def balance_of(self, token: HexAddress, holder: HexAddress) -> int:
        pass

    @abstractmethod
    def transfer(self, token: HexAddress, sender: HexAddress, to: HexAddress, amount: int):
        """Move `amount` of `token` from `sender` to `to`."""


class InMemoryTokenLedger(TokenLedger):
    """Token balances kept in Python dicts, token -> holder -> amount."""

    def __init__(self):
        self.balances: AddressDict = AddressDict()

    def _get_token_balances(self, token: HexAddress) -> AddressDict:
        token = normalise_address(token)
        if token not in self.balances:
            self.balances[token] = AddressDict()
        return self.balances[token]

    def mint(self, token: HexAddress | str, holder: HexAddress | str, amount: int):
        assert amount >= 0, f"Bad amount {amount}"
        balances = self._get_token_balances(token)
        balances[holder] = balances.get(holder, 0) + amount

    def balance_of(self, token: HexAddress, holder: HexAddress) -> int:
        balances = self.balances.get(token)
        if balances is None:
            return 0
        return balances.get(holder, 0)

    def transfer(self, token: HexAddress, sender: HexAddress, to: HexAddress, amount: int):
        to = require_non_zero_address(to, "receiver")
        if amount < 0:
            raise InvalidInput(f"Negative amount {amount}")
        balances = self._get_token_balances(token)
        balance = balances.get(sender, 0)
        if amount > balance:
            raise InsufficientBalance(f"{sender} holds {balance} of {token}, tried to send {amount}")
        balances[sender] = balance - amount
        balances[to] = balances.get(to, 0) + amount


class ERC20TokenLedger(TokenLedger):
    """ERC-20 tokens over JSON-RPC.

    - `sender` must be an account the connected node can sign for
    """

    def __init__(self, web3: Web3, receipt_timeout: float = 120.0):
        self.web3 = web3
        self.receipt_timeout = receipt_timeout
        self.contracts: AddressDict = AddressDict()

    def get_contract(self, token: HexAddress) -> Contract:
        contract = self.contracts.get(token)
        if contract is None:
            contract = get_deployed_contract(self.web3, "ERC20.json", token)
            self.contracts[token] = contract
        return contract

    def balance_of(self, token: HexAddress, holder: HexAddress) -> int:
        return self.get_contract(token).functions.balanceOf(Web3.to_checksum_address(holder)).call()

    def transfer(self, token: HexAddress, sender: HexAddress, to: HexAddress, amount: int):
        func = self.get_contract(token).functions.transfer(Web3.to_checksum_address(to), amount)
        tx_hash = func.transact({"from": Web3.to_checksum_address(sender)})
        receipt = self.web3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout)
        if receipt["status"] != 1:
            raise VaultTransactionFailed(f"Transfer of {amount} {token} to {to} reverted, tx {tx_hash.hex()}")
        logger.debug("Transferred %d %s to %s, tx %s", amount, token, to, tx_hash.hex())
