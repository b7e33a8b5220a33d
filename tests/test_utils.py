import datetime

import pytest

from eth_locker.errors import InvalidInput
from eth_locker.lower_case_dict import AddressDict
from eth_locker.roles import Roles
from eth_locker.utils import from_unix_timestamp, normalise_address, require_non_zero_address


def test_normalise_address():
    assert normalise_address("0xAbCdEf0000000000000000000000000000000001") == "0xabcdef0000000000000000000000000000000001"
    with pytest.raises(InvalidInput):
        normalise_address("0x1234")
    with pytest.raises(InvalidInput):
        normalise_address(None)


def test_require_non_zero_address():
    with pytest.raises(InvalidInput):
        require_non_zero_address("0x0000000000000000000000000000000000000000", "receiver")


def test_address_dict():
    d = AddressDict({"0xAbCdEf0000000000000000000000000000000001": 1})
    assert d["0xabcdef0000000000000000000000000000000001"] == 1
    assert "0xABCDEF0000000000000000000000000000000001" in d
    assert d.pop("0xabcdef0000000000000000000000000000000001") == 1
    assert d.get("0xabcdef0000000000000000000000000000000001") is None


def test_from_unix_timestamp():
    assert from_unix_timestamp(1_700_000_000) == datetime.datetime(2023, 11, 14, 22, 13, 20)
    assert from_unix_timestamp(0) == datetime.datetime(1970, 1, 1)


def test_roles_refuse_zero_address():
    with pytest.raises(InvalidInput):
        Roles(management="0x0000000000000000000000000000000000000000", performance_fee_recipient="0x5000000000000000000000000000000000000005")
