"""Time sources.

All locker logic reads time as integer UNIX seconds through a :py:class:`Clock`.
Time only moves between calls. There are no timers: cooldown expiry is
noticed the next time somebody asks.
"""

import logging
import time
from abc import ABC, abstractmethod

from web3 import Web3

from eth_locker.utils import from_unix_timestamp

logger = logging.getLogger(__name__)


class Clock(ABC):
    """Monotonically non-decreasing wall clock."""

    @abstractmethod
    def now(self) -> int:
        """Current time as UNIX seconds."""


class SystemClock(Clock):
    """Host wall clock."""

    def now(self) -> int:
        return int(time.time())


class ManualClock(Clock):
    """Clock that only moves when told to.

    Used in tests and simulations, like `boa.env.time_travel()`.
    """

    def __init__(self, start: int = 1_700_000_000):
        assert type(start) == int, f"Got {type(start)}"
        self.timestamp = start

    def __repr__(self):
        return f"<ManualClock {from_unix_timestamp(self.timestamp)}>"

    def now(self) -> int:
        return self.timestamp

    def time_travel(self, seconds: int) -> int:
        """Move the clock forward.

        :return:
            New timestamp
        """
        assert seconds >= 0, f"Cannot travel backwards: {seconds}"
        self.timestamp += seconds
        return self.timestamp

    def set(self, timestamp: int):
        """Jump to an absolute timestamp, which cannot be in the past."""
        assert timestamp >= self.timestamp, f"Clock cannot go backwards from {self.timestamp} to {timestamp}"
        self.timestamp = timestamp


class BlockClock(Clock):
    """Use the latest block timestamp as the time source.

    - Matches what the onchain contracts see as `block.timestamp`
    """

    def __init__(self, web3: Web3):
        self.web3 = web3

    def now(self) -> int:
        last_block = self.web3.eth.get_block("latest")
        ts = last_block["timestamp"]

        # Depending on middleware, response might be converted or not
        if type(ts) == str:
            ts = int(ts, 16)

        logger.debug("Latest block timestamp is %d", ts)
        return ts
