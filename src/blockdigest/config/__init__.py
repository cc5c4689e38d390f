"""Configuration models and loaders for blockdigest."""

from .loader import ConfigError, DEFAULT_CONFIG_PATH, HASH_FUNC_ENV, dump_example_config, load_config
from .models import BlockDigestConfig, HashingConfig, LoggingConfig, RuntimeConfig

__all__ = [
    "BlockDigestConfig",
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "HASH_FUNC_ENV",
    "HashingConfig",
    "LoggingConfig",
    "RuntimeConfig",
    "dump_example_config",
    "load_config",
]
