"""Core utilities shared by every transport: settings, exceptions, logging."""

from .config import CoreSettings, get_config
from .exceptions import (
    AuthenticationError,
    ConfigurationError,
    HevyMCPException,
    InternalError,
    RateLimitError,
    SessionNotFoundError,
    UpstreamError,
    ValidationException,
)

__all__ = [
    "CoreSettings",
    "get_config",
    "HevyMCPException",
    "ConfigurationError",
    "AuthenticationError",
    "RateLimitError",
    "SessionNotFoundError",
    "UpstreamError",
    "ValidationException",
    "InternalError",
]
