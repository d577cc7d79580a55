"""
Configuration management subsystem for Alchemy (2025).

Architecture
------------
- **config.py**: Static configuration from environment variables
- **manager.py**: Balance configuration from `config/*.yaml`
- **errors.py**: Configuration exception hierarchy

Static vs Balance Configuration
-------------------------------
**Static (Config):**
- Loaded from environment variables at startup
- Includes: database URL, pool sizes, logging flags
- Changes require a restart (except safe reload)

**Balance (ConfigManager):**
- Loaded from YAML files with dot-notation access
- Includes: tier thresholds, history paging
- In-memory overrides for tests and tooling

The logging subsystem imports `Config` at import time, so `ConfigManager`
(which logs) is imported from its own module rather than re-exported here.

Usage Examples
--------------
```python
from alchemy.core.config import Config
from alchemy.core.config.manager import ConfigManager

db_url = Config.DATABASE_URL
tiers = ConfigManager.get("rewards.tiers")
```
"""

from alchemy.core.config.config import Config, Environment
from alchemy.core.config.errors import (
    ConfigError,
    ConfigInitializationError,
    ConfigValidationError,
)

__all__ = [
    "Config",
    "Environment",
    "ConfigError",
    "ConfigInitializationError",
    "ConfigValidationError",
]
