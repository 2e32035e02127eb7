"""Carrier normalizers: raw export rows -> NormalizedShipment."""
