"""Catalogue, upgrade calculator, setup optimizer and analytics for F1 Clash."""

__version__ = "0.5.0"