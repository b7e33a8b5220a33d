"""Bunch of random utilities."""

import datetime
import logging
import os
from pathlib import Path
from typing import Optional

import coloredlogs
from eth_typing import HexAddress
from eth_utils import is_hex_address

from eth_locker.constants import ZERO_ADDRESS
from eth_locker.errors import InvalidInput


logger = logging.getLogger(__name__)


def normalise_address(address: HexAddress | str) -> HexAddress:
    """Lowercase an address so it can be used as a dictionary key.

    :raise InvalidInput:
        If the string is not a 20 byte hex address
    """
    if not isinstance(address, str) or not is_hex_address(address):
        raise InvalidInput(f"Not an address: {address}")
    return HexAddress(address.lower())


def is_zero_address(address: HexAddress | str) -> bool:
    """Is this the null account used for mints and burns."""
    return address.lower() == ZERO_ADDRESS


def require_non_zero_address(address: HexAddress | str, what: str = "address") -> HexAddress:
    """Normalise an address and refuse the zero address.

    :param what:
        Name used in the error message

    :raise InvalidInput:
        If the address is malformed or the zero address
    """
    address = normalise_address(address)
    if is_zero_address(address):
        raise InvalidInput(f"{what} cannot be the zero address")
    return address


def from_unix_timestamp(timestamp: int) -> datetime.datetime:
    """Convert UNIX seconds since epoch to naive Python datetime."""
    assert type(timestamp) in (int, float), f"Got {type(timestamp)}: {timestamp}"
    return datetime.datetime.fromtimestamp(timestamp, tz=datetime.timezone.utc).replace(tzinfo=None)


def setup_console_logging(
    default_log_level="warning",
    simplified_logging=False,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """Set up coloured log output.

    - Helper function to have nicer logging output in scripts
    - Tune down some noisy dependency library logging

    :param log_file:
        Output both console and this log file.

    :return:
        Root logger
    """

    level = os.environ.get("LOG_LEVEL", default_log_level).upper()
    numeric_level = getattr(logging, level, None)
    assert numeric_level, f"No level: {level}"

    if simplified_logging:
        fmt = "%(message)s"
    else:
        fmt = "%(asctime)s %(name)-44s %(message)s"
    date_fmt = "%H:%M:%S"

    coloredlogs.install(level=numeric_level, fmt=fmt, datefmt=date_fmt)

    if log_file:
        assert isinstance(log_file, Path), "log_file must be a Path"
        log_file.parent.mkdir(parents=True, exist_ok=True)

        # The file is always logged with INFO level and
        # env var controls only terminal output
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(min(logging.INFO, numeric_level))
        file_handler.setFormatter(logging.Formatter(fmt, date_fmt))
        root = logging.getLogger()
        root.setLevel(min(logging.INFO, numeric_level))
        root.addHandler(file_handler)

    # Mute noise
    logging.getLogger("web3.providers.HTTPProvider").setLevel(logging.WARNING)
    logging.getLogger("web3.RequestManager").setLevel(logging.WARNING)
    logging.getLogger("urllib3.connectionpool").setLevel(logging.WARNING)
    return logging.getLogger()
