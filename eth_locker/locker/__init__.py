"""Cooldown gated withdrawals and fee accrual.

- Start from :py:class:`eth_locker.locker.vault.LockedVault`
"""
