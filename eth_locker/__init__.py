"""eth_locker package root.

Cooldown-gated withdrawals and fee accrual for yield-bearing vaults.

- See :py:class:`eth_locker.locker.vault.LockedVault` to get started
- See :py:class:`eth_locker.distributor.splitter.FeeDistributor` for fee splitting
"""

import sys


#: Minimum required Python version to run this package
MIN_PYTHON_VERSION = (3, 10)


def _check_python_version():
    """Try early abort if the Python version is too old."""

    # Use Python tuple comparison for version numbers
    # https://stackoverflow.com/a/1093331/315168
    if sys.version_info < MIN_PYTHON_VERSION:
        raise RuntimeError(f"web3-vault-locker needs Python {MIN_PYTHON_VERSION[0]}.{MIN_PYTHON_VERSION[1]} or later")


_check_python_version()
