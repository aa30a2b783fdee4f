"""Stake-and-mint relay between an OpenST value chain and utility chain."""

__version__ = "0.1.0"
