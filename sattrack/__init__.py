"""Satellite tracking: TLEs, near-earth SGP4 propagation, frames and observation formats."""

__version__ = "0.1.0"