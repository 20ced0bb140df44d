"""Configuration and logging shared by the scrollterm programs."""
from .config import (
    Config, ScrollbackHandler, UIConfig, configure_logger, get_config, load_config
)

__all__ = [
    'Config', 'ScrollbackHandler', 'UIConfig', 'configure_logger',
    'get_config', 'load_config'
]
