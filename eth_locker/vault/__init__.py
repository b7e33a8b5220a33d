"""Underlying vault collaborators: the interface, an in-memory simulation and a web3 adapter."""
