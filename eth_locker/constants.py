"""Shared constants for the locker and the fee distributor."""

import datetime

#: 100% expressed in basis points
MAX_BPS = 10_000

#: Management fee cap, 2% annual
MAX_MANAGEMENT_FEE_BPS = 200

#: Seconds per year as used by Yearn accountants
#:
#: 365.2425 days
SECONDS_PER_YEAR = 31_556_952

#: ERC-4626 "no limit" sentinel returned by max withdraw queries
UNLIMITED = 2**256 - 1

#: Null account used for mints and burns
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

#: Withdrawal window must be longer than this
MIN_WITHDRAWAL_WINDOW = int(datetime.timedelta(days=1).total_seconds())

#: Default time between declaring a withdrawal and being able to redeem
DEFAULT_COOLDOWN_DURATION = int(datetime.timedelta(days=14).total_seconds())

#: Default time the redemption stays open after the cooldown has passed
DEFAULT_WITHDRAWAL_WINDOW = int(datetime.timedelta(days=7).total_seconds())

#: The distributor never sends out the last unit of a token balance
DISTRIBUTION_RESERVE = 1
