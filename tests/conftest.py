"""Shared fixtures for locker tests.

Everything runs on an in-memory vault with a manual clock, no chain needed.
"""

import pytest

from eth_locker.clock import ManualClock
from eth_locker.config import LockerConfig
from eth_locker.locker.vault import LockedVault
from eth_locker.roles import Roles
from eth_locker.vault.simulated import SimulatedVault


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock(start=1_700_000_000)


@pytest.fixture()
def vault_address() -> str:
    return "0x1000000000000000000000000000000000000001"


@pytest.fixture()
def locker_address() -> str:
    return "0x2000000000000000000000000000000000000002"


@pytest.fixture()
def strategy() -> str:
    return "0x3000000000000000000000000000000000000003"


@pytest.fixture()
def management() -> str:
    return "0x4000000000000000000000000000000000000004"


@pytest.fixture()
def treasury() -> str:
    """Performance fee recipient."""
    return "0x5000000000000000000000000000000000000005"


@pytest.fixture()
def alice() -> str:
    return "0xa000000000000000000000000000000000000001"


@pytest.fixture()
def bob() -> str:
    return "0xb000000000000000000000000000000000000002"


@pytest.fixture()
def roles(management, treasury) -> Roles:
    return Roles(management=management, performance_fee_recipient=treasury)


@pytest.fixture()
def locker_config() -> LockerConfig:
    """Default settings plus a 5% locker bonus on top of the 10% performance fee."""
    return LockerConfig(
        management_fee_bps=0,
        performance_fee_bps=1_000,
        locker_bonus_bps=500,
    )


@pytest.fixture()
def vault(clock, vault_address, alice, bob) -> SimulatedVault:
    """Vault where alice holds 1M shares and bob 500k."""
    vault = SimulatedVault(vault_address, clock)
    vault.mint_assets(alice, 1_000_000)
    vault.mint_assets(bob, 500_000)
    vault.deposit(1_000_000, alice, sender=alice)
    vault.deposit(500_000, bob, sender=bob)
    return vault


@pytest.fixture()
def locker(vault, locker_address, roles, clock, locker_config) -> LockedVault:
    locker = LockedVault(vault, address=locker_address, roles=roles, clock=clock, config=locker_config)
    vault.set_accountant(locker)
    return locker
