"""Core configuration, errors and logging for querymod."""

from querymod.core.config import FilterType, QueryConfig, SearchMode
from querymod.core.logging import Logger, color_palette, log

__all__ = ["QueryConfig", "FilterType", "SearchMode", "Logger", "log", "color_palette"]
# the __all__ variable is used to define what symbols get exported when the module is imported
