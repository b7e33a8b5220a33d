"""Basis point token distribution."""

import pytest
from web3.exceptions import ContractLogicError

from eth_locker.distributor.ledger import InMemoryTokenLedger
from eth_locker.distributor.splitter import FeeDistributor
from eth_locker.errors import (
    ConfigurationInvalid,
    DistributionBatchError,
    InsufficientBalance,
    InvalidInput,
    Unauthorized,
)
from eth_locker.events import Distributed, ReceiverRemoved, SplitUpdated, filter_events

DISTRIBUTOR = "0x6000000000000000000000000000000000000006"
GOVERNANCE = "0x4000000000000000000000000000000000000004"
USDC = "0xc000000000000000000000000000000000000001"
WETH = "0xc000000000000000000000000000000000000002"
R1 = "0xd000000000000000000000000000000000000001"
R2 = "0xd000000000000000000000000000000000000002"
R3 = "0xd000000000000000000000000000000000000003"


@pytest.fixture()
def ledger() -> InMemoryTokenLedger:
    return InMemoryTokenLedger()


@pytest.fixture()
def distributor(ledger) -> FeeDistributor:
    return FeeDistributor(DISTRIBUTOR, ledger, governance=GOVERNANCE)


def test_distribute_60_40(distributor: FeeDistributor, ledger: InMemoryTokenLedger):
    distributor.update_split(USDC, R1, 6_000, sender=GOVERNANCE)
    distributor.update_split(USDC, R2, 4_000, sender=GOVERNANCE)
    ledger.mint(USDC, DISTRIBUTOR, 1_001)

    result = distributor.distribute(USDC)
    assert result.payouts == {R1: 600, R2: 400}
    assert result.distributed == 1_000
    assert result.retained == 1

    assert ledger.balance_of(USDC, R1) == 600
    assert ledger.balance_of(USDC, R2) == 400
    assert ledger.balance_of(USDC, DISTRIBUTOR) == 1
    assert filter_events(distributor.events, Distributed) == [
        Distributed(token=USDC, receiver=R1, amount=600),
        Distributed(token=USDC, receiver=R2, amount=400),
    ]


def test_flooring_remainder_retained(distributor: FeeDistributor, ledger: InMemoryTokenLedger):
    distributor.update_split(USDC, R1, 3_333, sender=GOVERNANCE)
    distributor.update_split(USDC, R2, 3_333, sender=GOVERNANCE)
    ledger.mint(USDC, DISTRIBUTOR, 101)

    result = distributor.distribute(USDC)
    assert result.payouts == {R1: 33, R2: 33}
    assert ledger.balance_of(USDC, DISTRIBUTOR) == 35


def test_split_over_100_percent(distributor: FeeDistributor):
    distributor.update_split(USDC, R1, 6_000, sender=GOVERNANCE)
    distributor.update_split(USDC, R2, 4_000, sender=GOVERNANCE)

    with pytest.raises(ConfigurationInvalid):
        distributor.update_split(USDC, R3, 1, sender=GOVERNANCE)

    with pytest.raises(ConfigurationInvalid):
        distributor.configure_split(USDC, R1, 6_001, sender=GOVERNANCE)

    assert distributor.get_receivers(USDC) == [R1, R2]
    assert distributor.get_splits(USDC) == {R1: 6_000, R2: 4_000}
    assert distributor.get_total_split(USDC) == 10_000


def test_lower_existing_split(distributor: FeeDistributor):
    distributor.update_split(USDC, R1, 6_000, sender=GOVERNANCE)
    distributor.update_split(USDC, R2, 4_000, sender=GOVERNANCE)
    distributor.update_split(USDC, R1, 5_000, sender=GOVERNANCE)
    distributor.update_split(USDC, R3, 1_000, sender=GOVERNANCE)

    assert distributor.get_total_split(USDC) == 10_000
    assert distributor.get_receivers(USDC) == [R1, R2, R3]
    assert filter_events(distributor.events, SplitUpdated)[-1] == SplitUpdated(token=USDC, receiver=R3, split_bps=1_000, total_split_bps=10_000)


def test_zero_split_keeps_receiver(distributor: FeeDistributor, ledger: InMemoryTokenLedger):
    distributor.update_split(USDC, R1, 6_000, sender=GOVERNANCE)
    distributor.update_split(USDC, R2, 4_000, sender=GOVERNANCE)
    distributor.update_split(USDC, R1, 0, sender=GOVERNANCE)

    assert distributor.get_receivers(USDC) == [R1, R2]
    assert distributor.get_split(USDC, R1) == 0

    ledger.mint(USDC, DISTRIBUTOR, 1_001)
    result = distributor.distribute(USDC)
    assert result.payouts == {R2: 400}
    assert ledger.balance_of(USDC, DISTRIBUTOR) == 601


def test_remove_receiver(distributor: FeeDistributor):
    distributor.update_split(USDC, R1, 6_000, sender=GOVERNANCE)
    distributor.update_split(USDC, R2, 3_000, sender=GOVERNANCE)
    distributor.update_split(USDC, R3, 1_000, sender=GOVERNANCE)

    distributor.remove_receiver(USDC, R2, sender=GOVERNANCE)
    assert distributor.get_receivers(USDC) == [R1, R3]
    assert distributor.get_total_split(USDC) == 7_000
    assert filter_events(distributor.events, ReceiverRemoved) == [ReceiverRemoved(token=USDC, receiver=R2, total_split_bps=7_000)]

    with pytest.raises(InvalidInput):
        distributor.remove_receiver(USDC, R2, sender=GOVERNANCE)

    with pytest.raises(InvalidInput):
        distributor.remove_receiver(WETH, R1, sender=GOVERNANCE)


def test_governance_only(distributor: FeeDistributor):
    with pytest.raises(Unauthorized):
        distributor.update_split(USDC, R1, 6_000, sender=R1)

    distributor.update_split(USDC, R1, 6_000, sender=GOVERNANCE)
    with pytest.raises(Unauthorized):
        distributor.remove_receiver(USDC, R1, sender=R1)

    distributor.transfer_governance(R3, sender=GOVERNANCE)
    with pytest.raises(Unauthorized):
        distributor.update_split(USDC, R2, 1_000, sender=GOVERNANCE)
    distributor.update_split(USDC, R2, 1_000, sender=R3)


def test_split_validation(distributor: FeeDistributor):
    with pytest.raises(InvalidInput):
        distributor.update_split("0x0000000000000000000000000000000000000000", R1, 1_000, sender=GOVERNANCE)
    with pytest.raises(InvalidInput):
        distributor.update_split(USDC, "0x0000000000000000000000000000000000000000", 1_000, sender=GOVERNANCE)
    with pytest.raises(ConfigurationInvalid):
        distributor.update_split(USDC, R1, 10_001, sender=GOVERNANCE)
    with pytest.raises(ConfigurationInvalid):
        distributor.update_split(USDC, R1, -1, sender=GOVERNANCE)
    assert distributor.get_receivers(USDC) == []


def test_distribute_without_splits(distributor: FeeDistributor, ledger: InMemoryTokenLedger):
    ledger.mint(USDC, DISTRIBUTOR, 1_000)
    with pytest.raises(ConfigurationInvalid):
        distributor.distribute(USDC)

    distributor.update_split(USDC, R1, 0, sender=GOVERNANCE)
    with pytest.raises(ConfigurationInvalid):
        distributor.distribute(USDC)


def test_distribute_empty_balance(distributor: FeeDistributor, ledger: InMemoryTokenLedger):
    distributor.update_split(USDC, R1, 10_000, sender=GOVERNANCE)
    with pytest.raises(InsufficientBalance):
        distributor.distribute(USDC)

    # The reserved unit alone pays nothing
    ledger.mint(USDC, DISTRIBUTOR, 1)
    result = distributor.distribute(USDC)
    assert result.payouts == {}
    assert ledger.balance_of(USDC, DISTRIBUTOR) == 1


def test_distribute_many(distributor: FeeDistributor, ledger: InMemoryTokenLedger):
    distributor.update_split(USDC, R1, 10_000, sender=GOVERNANCE)
    distributor.update_split(WETH, R2, 5_000, sender=GOVERNANCE)
    ledger.mint(USDC, DISTRIBUTOR, 101)
    ledger.mint(WETH, DISTRIBUTOR, 201)

    results = distributor.distribute_many([USDC, WETH])
    assert [r.token for r in results] == [USDC, WETH]
    assert ledger.balance_of(USDC, R1) == 100
    assert ledger.balance_of(WETH, R2) == 100


def test_distribute_many_partial_failure(distributor: FeeDistributor, ledger: InMemoryTokenLedger, caplog):
    """A token without balance fails alone, the other is still paid and the failure is reported."""
    distributor.update_split(USDC, R1, 10_000, sender=GOVERNANCE)
    distributor.update_split(WETH, R2, 10_000, sender=GOVERNANCE)
    ledger.mint(WETH, DISTRIBUTOR, 11)

    with pytest.raises(DistributionBatchError) as exc_info:
        distributor.distribute_many([USDC, WETH])

    e = exc_info.value
    assert list(e.failures.keys()) == [USDC]
    assert isinstance(e.failures[USDC], InsufficientBalance)
    assert [r.token for r in e.completed] == [WETH]
    assert ledger.balance_of(WETH, R2) == 10

    # Failed token's table is untouched
    assert distributor.get_splits(USDC) == {R1: 10_000}
    assert "Distribution of" in caplog.text


class RevertingLedger(InMemoryTokenLedger):
    """Ledger whose transfers of one token to one receiver revert onchain."""

    def __init__(self, token: str, receiver: str):
        super().__init__()
        self.reverting = (token, receiver)

    def transfer(self, token, sender, to, amount):
        if (token, to) == self.reverting:
            raise ContractLogicError("execution reverted: ERC20: transfer to blocked address")
        super().transfer(token, sender, to, amount)


def test_distribute_many_contract_revert():
    """A web3 revert half way through one token is collected, the rest of the batch is paid."""
    ledger = RevertingLedger(USDC, R2)
    distributor = FeeDistributor(DISTRIBUTOR, ledger, governance=GOVERNANCE)
    distributor.update_split(USDC, R1, 5_000, sender=GOVERNANCE)
    distributor.update_split(USDC, R2, 5_000, sender=GOVERNANCE)
    distributor.update_split(WETH, R1, 10_000, sender=GOVERNANCE)
    ledger.mint(USDC, DISTRIBUTOR, 101)
    ledger.mint(WETH, DISTRIBUTOR, 11)

    with pytest.raises(DistributionBatchError) as exc_info:
        distributor.distribute_many([USDC, WETH])

    e = exc_info.value
    assert list(e.failures.keys()) == [USDC]
    assert isinstance(e.failures[USDC], ContractLogicError)
    assert [r.token for r in e.completed] == [WETH]
    assert ledger.balance_of(WETH, R1) == 10

    # R1 was paid before the revert and the event log says so
    assert ledger.balance_of(USDC, R1) == 50
    assert ledger.balance_of(USDC, R2) == 0
    assert ledger.balance_of(USDC, DISTRIBUTOR) == 51
    assert filter_events(distributor.events, Distributed) == [
        Distributed(token=USDC, receiver=R1, amount=50),
        Distributed(token=WETH, receiver=R1, amount=10),
    ]


def test_distribute_many_failure_keyed_by_lowercase_token(distributor: FeeDistributor, ledger: InMemoryTokenLedger):
    distributor.update_split(WETH, R2, 10_000, sender=GOVERNANCE)
    ledger.mint(WETH, DISTRIBUTOR, 11)
    mixed_case_usdc = "0xC000000000000000000000000000000000000001"
    mixed_case_weth = "0xC000000000000000000000000000000000000002"

    with pytest.raises(DistributionBatchError) as exc_info:
        distributor.distribute_many([mixed_case_usdc, mixed_case_weth])

    e = exc_info.value
    assert list(e.failures.keys()) == [USDC]
    assert isinstance(e.failures[USDC], ConfigurationInvalid)
    assert [r.token for r in e.completed] == [WETH]
