"""Time sources."""

from unittest.mock import Mock

import pytest

from eth_locker.clock import BlockClock, ManualClock, SystemClock


def test_manual_clock():
    clock = ManualClock(start=1_000)
    assert clock.now() == 1_000
    assert clock.time_travel(500) == 1_500
    clock.set(2_000)
    assert clock.now() == 2_000


def test_manual_clock_refuses_going_back():
    clock = ManualClock(start=1_000)
    with pytest.raises(AssertionError):
        clock.set(999)
    with pytest.raises(AssertionError):
        clock.time_travel(-1)


def test_system_clock():
    assert SystemClock().now() > 1_700_000_000


@pytest.mark.parametrize("timestamp", [1_700_000_123, "0x6553f17b"])
def test_block_clock(timestamp):
    web3 = Mock()
    web3.eth.get_block.return_value = {"timestamp": timestamp}
    assert BlockClock(web3).now() == 1_700_000_123
    web3.eth.get_block.assert_called_with("latest")
