"""Events emitted by the locker and the fee distributor.

Mirrors contract logs: every state changing call appends one or more
of these to the owning object's `events` list.
"""

from dataclasses import dataclass
from typing import Iterable, Type, TypeVar

from eth_typing import HexAddress


@dataclass(frozen=True, slots=True)
class CooldownStarted:
    account: HexAddress
    shares: int
    timestamp: int


@dataclass(frozen=True, slots=True)
class CooldownCancelled:
    account: HexAddress
    timestamp: int


@dataclass(frozen=True, slots=True)
class CooldownDurationUpdated:
    cooldown_duration: int


@dataclass(frozen=True, slots=True)
class WithdrawalWindowUpdated:
    withdrawal_window: int


@dataclass(frozen=True, slots=True)
class FeesUpdated:
    management_fee_bps: int
    performance_fee_bps: int
    locker_bonus_bps: int


@dataclass(frozen=True, slots=True)
class FeesReported:
    """Result of one strategy report.

    Fee amounts are in the vault asset, `fee_shares` in vault shares.
    """

    strategy: HexAddress
    gain: int
    loss: int
    management_fee: int
    performance_fee: int
    locker_bonus: int
    total_fees: int

    #: Shares owed to the performance fee recipient
    fee_shares: int

    #: Paid out immediately, or added to the pending balance
    paid_out: bool


@dataclass(frozen=True, slots=True)
class FeesWithdrawn:
    receiver: HexAddress
    shares: int


@dataclass(frozen=True, slots=True)
class HealthCheckUpdated:
    enabled: bool
    profit_limit_bps: int
    loss_limit_bps: int


@dataclass(frozen=True, slots=True)
class SplitUpdated:
    token: HexAddress
    receiver: HexAddress
    split_bps: int
    total_split_bps: int


@dataclass(frozen=True, slots=True)
class ReceiverRemoved:
    token: HexAddress
    receiver: HexAddress
    total_split_bps: int


@dataclass(frozen=True, slots=True)
class Distributed:
    token: HexAddress
    receiver: HexAddress
    amount: int


EventT = TypeVar("EventT")


def filter_events(events: Iterable, event_type: Type[EventT]) -> list[EventT]:
    """Pick events of one type, oldest first."""
    return [e for e in events if isinstance(e, event_type)]
