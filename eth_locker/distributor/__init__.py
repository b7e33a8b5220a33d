"""Basis point proportional token distribution."""
