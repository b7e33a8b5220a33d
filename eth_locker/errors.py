"""Locker exceptions.

Every failure is fatal to the call that raised it.
Operations validate before they write, so a raised exception
never leaves partially applied state behind. The exception is a token
distribution over a non-atomic ledger, see :py:class:`DistributionBatchError`.
"""


class LockerError(Exception):
    """Base class for all errors raised by this package."""


class InvalidInput(LockerError, ValueError):
    """Zero shares, zero amount, zero address and such."""


class InsufficientBalance(LockerError):
    """Account does not hold enough shares or tokens for the operation."""


class CooldownSharesLocked(InsufficientBalance):
    """Transfer would dip into shares reserved by an active cooldown."""


class NoActiveCooldown(LockerError):
    """Tried to cancel a cooldown that does not exist."""


class WithdrawalNotEligible(LockerError):
    """Redemption attempted outside of the withdrawal window."""


class DuplicateReport(LockerError):
    """Strategy reported twice within the same timestamp."""


class HealthCheckFailed(LockerError):
    """Reported gain or loss is out of the allowed bounds."""


class ConfigurationInvalid(LockerError):
    """Fee, split or cooldown settings out of range."""


class Unauthorized(LockerError):
    """Caller does not hold the required role."""


class VaultTransactionFailed(LockerError):
    """Onchain vault transaction reverted."""


class DistributionBatchError(LockerError):
    """One or more tokens failed in a batch distribution.

    Tokens that succeeded have been paid out. A failed token keeps its split table.
    On an atomic ledger its balance is untouched as well. On an ERC-20 ledger the receivers
    paid before the failing transfer keep their payout, see the ``Distributed`` events.

    :param completed:
        Results of the tokens that went through

    :param failures:
        Lowercased token address to the exception it failed with
    """

    def __init__(self, completed: list, failures: dict):
        self.completed = completed
        self.failures = failures
        failed = ", ".join(f"{token}: {exc}" for token, exc in failures.items())
        super().__init__(f"Distribution failed for {len(failures)} token(s): {failed}")
