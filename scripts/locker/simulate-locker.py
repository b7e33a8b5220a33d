"""Walk a cooldown locker through deposits, reports, withdrawals and fee distribution.

Runs entirely in memory on a simulated Yearn V3 style vault.

Usage:

.. code-block:: shell

    LOG_LEVEL=info python scripts/locker/simulate-locker.py

Locker settings can be tuned with `LOCKER_*` environment variables,
see :py:mod:`eth_locker.config`.
"""

import datetime

from tabulate import tabulate

from eth_locker.clock import ManualClock
from eth_locker.config import LockerConfig
from eth_locker.distributor.ledger import InMemoryTokenLedger
from eth_locker.distributor.splitter import FeeDistributor
from eth_locker.events import FeesReported, filter_events
from eth_locker.locker.vault import LockedVault
from eth_locker.roles import Roles
from eth_locker.utils import from_unix_timestamp, setup_console_logging
from eth_locker.vault.simulated import SimulatedVault

VAULT = "0x1000000000000000000000000000000000000001"
LOCKER = "0x2000000000000000000000000000000000000002"
STRATEGY = "0x3000000000000000000000000000000000000003"
MANAGEMENT = "0x4000000000000000000000000000000000000004"
TREASURY = "0x5000000000000000000000000000000000000005"
DISTRIBUTOR = "0x6000000000000000000000000000000000000006"
DEV_FUND = "0x7000000000000000000000000000000000000007"
ALICE = "0xa000000000000000000000000000000000000001"
BOB = "0xb000000000000000000000000000000000000002"

DAY = int(datetime.timedelta(days=1).total_seconds())


def main():
    setup_console_logging(default_log_level="warning")

    config = LockerConfig.from_env()
    clock = ManualClock()
    vault = SimulatedVault(VAULT, clock)
    locker = LockedVault(
        vault,
        address=LOCKER,
        roles=Roles(management=MANAGEMENT, performance_fee_recipient=TREASURY),
        clock=clock,
        config=config,
    )
    vault.set_accountant(locker)

    for account, amount in ((ALICE, 1_000_000), (BOB, 500_000)):
        vault.mint_assets(account, amount)
        locker.deposit(amount, account, sender=account)

    vault.add_strategy(STRATEGY)
    vault.update_debt(STRATEGY, 1_200_000)

    # A week of 1% yield, reported daily
    for _ in range(7):
        clock.time_travel(DAY)
        current_debt = vault.fetch_strategy_params(STRATEGY).current_debt
        vault.set_strategy_assets(STRATEGY, current_debt + current_debt // 700)
        vault.process_report(STRATEGY)

    if locker.pending_fee_shares:
        locker.withdraw_fees(sender=TREASURY)

    # Pull everything back so withdrawals can be paid from idle assets
    vault.update_debt(STRATEGY, 0)

    alice_shares = vault.balance_of(ALICE) // 2
    treasury_shares = vault.balance_of(TREASURY)
    locker.start_cooldown(alice_shares, sender=ALICE)
    if treasury_shares:
        locker.start_cooldown(treasury_shares, sender=TREASURY)
    clock.time_travel(locker.cooldown_duration)
    alice_assets = locker.redeem(alice_shares, receiver=ALICE, owner=ALICE, sender=ALICE)

    reports = filter_events(locker.events, FeesReported)
    print(f"Simulation ended at {from_unix_timestamp(clock.now())}, {len(reports)} reports charged fees")
    print(f"Alice redeemed half of her shares for {alice_assets:,} assets")

    rows = [
        [
            e.gain,
            e.management_fee,
            e.performance_fee,
            e.locker_bonus,
            e.total_fees,
            e.fee_shares,
            "paid" if e.paid_out else "pending",
        ]
        for e in reports
    ]
    print(tabulate(rows, headers=["Gain", "Management", "Performance", "Locker bonus", "Total", "Fee shares", "Payout"], tablefmt="grid"))

    # Treasury cashes out its fee shares and forwards them to the distributor for splitting
    assets = 0
    if treasury_shares:
        assets = locker.redeem(treasury_shares, receiver=TREASURY, owner=TREASURY, sender=TREASURY)

    ledger = InMemoryTokenLedger()
    ledger.mint(VAULT, DISTRIBUTOR, assets + 1)
    distributor = FeeDistributor(DISTRIBUTOR, ledger, governance=MANAGEMENT)
    distributor.update_split(VAULT, TREASURY, 7_000, sender=MANAGEMENT)
    distributor.update_split(VAULT, DEV_FUND, 3_000, sender=MANAGEMENT)
    result = distributor.distribute(VAULT)

    rows = [[receiver, distributor.get_split(VAULT, receiver), amount] for receiver, amount in result.payouts.items()]
    print(tabulate(rows, headers=["Receiver", "Split bps", "Paid"], tablefmt="grid"))
    print(f"Distributed {result.distributed:,}, retained {result.retained:,}")


if __name__ == "__main__":
    main()
