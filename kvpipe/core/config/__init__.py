"""
Configuration Module

Components:
-----------
- **settings.py**: PoolConfig value object and environment-based Settings
- **constants.py**: Defaults, stage identifiers and enums

Usage:
------
```python
from kvpipe.core.config import PoolConfig, get_settings

config = PoolConfig(address="localhost:6379", max_active=20)
config = get_settings().pool
```
"""

from kvpipe.core.config.settings import (
    LoggingSettings,
    PoolConfig,
    Settings,
    get_settings,
    reload_settings,
)

__all__ = [
    "LoggingSettings",
    "PoolConfig",
    "Settings",
    "get_settings",
    "reload_settings",
]
