"""Simulated provider package for offline runs and tests."""

from .client import SimulatedPricingTransport

__all__ = ["SimulatedPricingTransport"]
