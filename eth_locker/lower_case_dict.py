"""Ethereum address headache tools."""

from eth_locker.utils import normalise_address


class AddressDict(dict):
    """A dictionary keyed by addresses in lowercase.

    - Callers mix checksummed and lowercased addresses,
      so every key goes through :py:func:`eth_locker.utils.normalise_address`

    - Iteration order is insertion order, like any Python dict.
      The fee distributor relies on this for its payout order.
    """

    def __init__(self, *args, **kwargs):
        super().__init__()
        if args:
            if len(args) > 1:
                raise TypeError("expected at most 1 argument, got %d" % len(args))
            self.update(args[0])
        if kwargs:
            self.update(kwargs)

    def __setitem__(self, key, value):
        super().__setitem__(normalise_address(key), value)

    def __getitem__(self, key):
        return super().__getitem__(normalise_address(key))

    def __delitem__(self, key):
        super().__delitem__(normalise_address(key))

    def __contains__(self, key):
        return super().__contains__(normalise_address(key))

    def get(self, key, default=None):
        return super().get(normalise_address(key), default)

    def pop(self, key, *args):
        return super().pop(normalise_address(key), *args)

    def update(self, other=None, **kwargs):
        if other is not None:
            for k, v in other.items() if isinstance(other, dict) else other:
                self[k] = v
        for k, v in kwargs.items():
            self[k] = v

    def setdefault(self, key, default=None):
        return super().setdefault(normalise_address(key), default)
