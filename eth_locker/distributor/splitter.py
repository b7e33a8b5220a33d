"""Split accumulated token balances between receivers in basis points.

Each token has its own split table. Receivers are paid in the order they were first added.

- One unit of every token balance is always kept back
- Flooring remainders and any unallocated share of the balance stay in the distributor
  and roll into the next distribution

Example:

.. code-block:: python

    ledger = InMemoryTokenLedger()
    distributor = FeeDistributor(distributor_address, ledger, governance=governance)
    distributor.update_split(usdc, treasury, 6_000, sender=governance)
    distributor.update_split(usdc, dev_fund, 4_000, sender=governance)

    ledger.mint(usdc, distributor_address, 1_001)
    result = distributor.distribute(usdc)
    assert result.payouts == {treasury: 600, dev_fund: 400}
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable

from eth_typing import HexAddress

from eth_locker.constants import DISTRIBUTION_RESERVE, MAX_BPS
from eth_locker.distributor.ledger import TokenLedger
from eth_locker.errors import (
    ConfigurationInvalid,
    DistributionBatchError,
    InsufficientBalance,
    InvalidInput,
    Unauthorized,
)
from eth_locker.events import Distributed, ReceiverRemoved, SplitUpdated
from eth_locker.lower_case_dict import AddressDict
from eth_locker.utils import normalise_address, require_non_zero_address

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TokenSplitTable:
    """Receivers of one token."""

    #: receiver -> bps, in insertion order
    splits: AddressDict = field(default_factory=AddressDict)

    #: Always the sum of `splits`
    total_split_bps: int = 0

    def get_receivers(self) -> list[HexAddress]:
        return list(self.splits.keys())


@dataclass(frozen=True, slots=True)
class DistributionResult:
    """What one :py:meth:`FeeDistributor.distribute` call paid out."""

    token: HexAddress

    #: Distributor balance before the payout
    balance: int

    #: receiver -> amount, receivers with nothing to receive are left out
    payouts: dict[HexAddress, int]

    @property
    def distributed(self) -> int:
        return sum(self.payouts.values())

    @property
    def retained(self) -> int:
        return self.balance - self.distributed


class FeeDistributor:
    """Basis point splitter for tokens collected at `address`.

    - Split changes are governance only
    - Anyone can trigger a distribution

    :param address:
        Account holding the tokens to be distributed

    :param ledger:
        Where balances are read and transfers made
    """

    def __init__(self, address: HexAddress | str, ledger: TokenLedger, governance: HexAddress | str):
        self.address = require_non_zero_address(address, "distributor")
        self.ledger = ledger
        self.governance = require_non_zero_address(governance, "governance")
        self.tables: AddressDict = AddressDict()

        #: Everything that happened, oldest first
        self.events = []

    def __repr__(self):
        return f"<FeeDistributor {self.address} tokens:{len(self.tables)}>"

    def _require_governance(self, sender: HexAddress | str):
        if normalise_address(sender) != self.governance:
            raise Unauthorized(f"{sender} is not governance of distributor {self.address}")

    def transfer_governance(self, new_governance: HexAddress | str, sender: HexAddress | str):
        self._require_governance(sender)
        self.governance = require_non_zero_address(new_governance, "governance")
        logger.info("Distributor %s governance moved to %s", self.address, self.governance)

    def get_table(self, token: HexAddress | str) -> TokenSplitTable:
        table = self.tables.get(token)
        if table is None:
            return TokenSplitTable()
        return table

    def get_receivers(self, token: HexAddress | str) -> list[HexAddress]:
        return self.get_table(token).get_receivers()

    def get_split(self, token: HexAddress | str, receiver: HexAddress | str) -> int:
        return self.get_table(token).splits.get(receiver, 0)

    def get_splits(self, token: HexAddress | str) -> dict[HexAddress, int]:
        return dict(self.get_table(token).splits)

    def get_total_split(self, token: HexAddress | str) -> int:
        return self.get_table(token).total_split_bps

    def update_split(self, token: HexAddress | str, receiver: HexAddress | str, split_bps: int, sender: HexAddress | str):
        """Add a receiver or change its split.

        A zero split keeps the receiver on the list, see :py:meth:`remove_receiver`.

        :raise ConfigurationInvalid:
            The token's splits would add up to more than 100%. The table is left as is.
        """
        self._require_governance(sender)
        token = require_non_zero_address(token, "token")
        receiver = require_non_zero_address(receiver, "receiver")
        if type(split_bps) != int or not 0 <= split_bps <= MAX_BPS:
            raise ConfigurationInvalid(f"Split must be an int in [0, {MAX_BPS}], got {split_bps!r}")

        table = self.get_table(token)
        new_total = table.total_split_bps - table.splits.get(receiver, 0) + split_bps
        if new_total > MAX_BPS:
            raise ConfigurationInvalid(f"Splits of {token} would total {new_total} bps")

        table.splits[receiver] = split_bps
        table.total_split_bps = new_total
        self.tables[token] = table

        self.events.append(SplitUpdated(token=token, receiver=receiver, split_bps=split_bps, total_split_bps=new_total))
        logger.info("Split of %s for %s set to %d bps, total %d bps", token, receiver, split_bps, new_total)

    configure_split = update_split

    def remove_receiver(self, token: HexAddress | str, receiver: HexAddress | str, sender: HexAddress | str):
        """:raise InvalidInput: Receiver is not on the token's list"""
        self._require_governance(sender)
        table = self.tables.get(token)
        if table is None or receiver not in table.splits:
            raise InvalidInput(f"{receiver} is not a receiver of {token}")

        token = normalise_address(token)
        receiver = normalise_address(receiver)
        table.total_split_bps -= table.splits.pop(receiver)

        self.events.append(ReceiverRemoved(token=token, receiver=receiver, total_split_bps=table.total_split_bps))
        logger.info("Removed %s from receivers of %s, total %d bps", receiver, token, table.total_split_bps)

    def distribute(self, token: HexAddress | str) -> DistributionResult:
        """Pay out the distributor's balance of one token.

        :raise ConfigurationInvalid:
            No receivers, or all splits are zero

        :raise InsufficientBalance:
            Nothing to distribute
        """
        token = require_non_zero_address(token, "token")
        table = self.get_table(token)
        if table.total_split_bps == 0 or not table.splits:
            raise ConfigurationInvalid(f"No splits configured for {token}")

        balance = self.ledger.balance_of(token, self.address)
        if balance < DISTRIBUTION_RESERVE:
            raise InsufficientBalance(f"Distributor {self.address} holds no {token}")

        distributable = balance - DISTRIBUTION_RESERVE
        payouts = {receiver: distributable * split_bps // MAX_BPS for receiver, split_bps in table.splits.items()}

        for receiver, amount in payouts.items():
            if amount == 0:
                continue
            self.ledger.transfer(token, self.address, receiver, amount)
            self.events.append(Distributed(token=token, receiver=receiver, amount=amount))

        result = DistributionResult(
            token=token,
            balance=balance,
            payouts={receiver: amount for receiver, amount in payouts.items() if amount > 0},
        )
        logger.info("Distributed %d of %d %s to %d receivers", result.distributed, balance, token, len(result.payouts))
        return result

    def distribute_many(self, tokens: Iterable[HexAddress | str]) -> list[DistributionResult]:
        """Distribute several tokens.

        Tokens are processed one by one. A failing token does not stop the rest.
        Any exception counts as a failure, including contract reverts raised by web3.

        A token ledger that is not atomic, such as :py:class:`ERC20TokenLedger`, can fail
        half way through a token. Receivers paid before the failed transfer keep their payout
        and have a :py:class:`Distributed` event in :py:attr:`events`.

        :raise DistributionBatchError:
            After all tokens were tried, if any of them failed.
            Carries the results of the tokens that went through.
        """
        completed = []
        failures = {}
        for token in tokens:
            try:
                completed.append(self.distribute(token))
            except Exception as e:
                logger.error("Distribution of %s failed: %s", token, e)
                failures[token.lower() if isinstance(token, str) else token] = e

        if failures:
            raise DistributionBatchError(completed, failures)

        return completed
