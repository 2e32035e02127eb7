"""Courier billing reconciliation: normalize carrier exports and flag overbilling."""

__version__ = "0.1.0"
