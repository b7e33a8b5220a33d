"""Onchain vault adapter against a mocked web3.

The contract proxies are mocks, so these tests check the calls made
and the decoding of the results without a node.
"""

from unittest.mock import Mock

import pytest
from hexbytes import HexBytes
from web3 import Web3

from eth_locker.clock import ManualClock
from eth_locker.errors import VaultTransactionFailed, WithdrawalNotEligible
from eth_locker.locker.vault import LockedVault
from eth_locker.vault.onchain import OnchainVault

VAULT = "0x1000000000000000000000000000000000000001"
FACTORY = "0x8000000000000000000000000000000000000008"
PROTOCOL = "0x9000000000000000000000000000000000000009"
STRATEGY = "0x3000000000000000000000000000000000000003"
ALICE = "0xa000000000000000000000000000000000000001"
TX_HASH = HexBytes("0x" + "ab" * 32)


@pytest.fixture()
def vault_contract() -> Mock:
    contract = Mock()
    contract.functions.factory.return_value.call.return_value = Web3.to_checksum_address(FACTORY)
    contract.functions.balanceOf.return_value.call.return_value = 1_000_000
    contract.functions.convertToAssets.return_value.call.return_value = 1_050_000
    contract.functions.isShutdown.return_value.call.return_value = False
    contract.functions.strategies.return_value.call.return_value = (1_690_000_000, 1_700_000_000, 750_000, 10**24)
    contract.functions.previewRedeem.return_value.call.return_value = 105_000
    contract.functions.redeem.return_value.transact.return_value = TX_HASH
    return contract


@pytest.fixture()
def factory_contract() -> Mock:
    contract = Mock()
    contract.functions.protocol_fee_config.return_value.call.return_value = (1_000, Web3.to_checksum_address(PROTOCOL))
    return contract


@pytest.fixture()
def web3(vault_contract, factory_contract) -> Mock:
    contracts = {
        Web3.to_checksum_address(VAULT): vault_contract,
        Web3.to_checksum_address(FACTORY): factory_contract,
    }
    web3 = Mock()
    web3.eth.contract.side_effect = lambda address, abi: contracts[address]
    web3.eth.wait_for_transaction_receipt.return_value = {"status": 1}
    return web3


@pytest.fixture()
def onchain_vault(web3) -> OnchainVault:
    return OnchainVault(web3, VAULT)


def test_reads(onchain_vault: OnchainVault, vault_contract: Mock):
    assert onchain_vault.address == VAULT
    assert onchain_vault.balance_of(ALICE) == 1_000_000
    vault_contract.functions.balanceOf.assert_called_with(Web3.to_checksum_address(ALICE))
    assert onchain_vault.convert_to_assets(1_000_000) == 1_050_000
    assert not onchain_vault.is_shutdown()


def test_fetch_strategy_params(onchain_vault: OnchainVault):
    params = onchain_vault.fetch_strategy_params(STRATEGY)
    assert params.activation == 1_690_000_000
    assert params.last_report == 1_700_000_000
    assert params.current_debt == 750_000


def test_fetch_protocol_fee_config(onchain_vault: OnchainVault):
    config = onchain_vault.fetch_protocol_fee_config()
    assert config.fee_bps == 1_000
    assert config.recipient == PROTOCOL


def test_redeem(onchain_vault: OnchainVault, vault_contract: Mock, web3: Mock):
    assert onchain_vault.redeem(100_000, ALICE, ALICE, sender=ALICE) == 105_000
    checksummed = Web3.to_checksum_address(ALICE)
    vault_contract.functions.redeem.assert_called_with(100_000, checksummed, checksummed)
    vault_contract.functions.redeem.return_value.transact.assert_called_with({"from": checksummed})
    web3.eth.wait_for_transaction_receipt.assert_called_with(TX_HASH, timeout=120.0)


def test_reverted_transaction(onchain_vault: OnchainVault, web3: Mock):
    web3.eth.wait_for_transaction_receipt.return_value = {"status": 0}
    with pytest.raises(VaultTransactionFailed):
        onchain_vault.redeem(100_000, ALICE, ALICE, sender=ALICE)


def test_locker_gates_onchain_redeem(onchain_vault: OnchainVault, vault_contract: Mock):
    """Onchain vault does not call hooks, so the locker checks the window before sending anything."""
    clock = ManualClock()
    locker = LockedVault(
        onchain_vault,
        address="0x2000000000000000000000000000000000000002",
        roles=Mock(),
        clock=clock,
    )
    assert not locker.hooks_installed

    with pytest.raises(WithdrawalNotEligible):
        locker.redeem(100_000, ALICE, ALICE, sender=ALICE)
    vault_contract.functions.redeem.assert_not_called()

    status = locker.start_cooldown(100_000, sender=ALICE)
    clock.set(status.cooldown_end)
    vault_contract.functions.convertToAssets.return_value.call.return_value = 105_000
    assert locker.redeem(100_000, ALICE, ALICE, sender=ALICE) == 105_000
    assert locker.get_cooldown_status(ALICE).shares == 0
