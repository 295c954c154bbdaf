"""
Runtime Configuration Module

Provides configuration loading and management for soapwire.
"""

from .runtime import (
    DEFAULT_USER_AGENT,
    HttpConfig,
    RuntimeConfig,
    get_default_config,
    set_default_config,
)

__all__ = [
    "DEFAULT_USER_AGENT",
    "HttpConfig",
    "RuntimeConfig",
    "get_default_config",
    "set_default_config",
]
