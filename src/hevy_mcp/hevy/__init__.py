"""Hevy REST API client and input models."""

from .client import HevyClient

__all__ = ["HevyClient"]
