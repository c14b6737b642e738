"""Directory configuration models, loader and live reload."""

from .holder import ConfigHolder
from .loader import DirectoryConfigError, load_config
from .models import DirectoryConfig, DirectoryEntry

__all__ = [
    "ConfigHolder",
    "DirectoryConfig",
    "DirectoryConfigError",
    "DirectoryEntry",
    "load_config",
]
