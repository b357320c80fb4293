"""
Showcase Core
=============

Core utilities and shared functionality for showcase modules.
"""

from .config import Config, get_config_value
from .database import ShowcaseDatabase, ProjectStatus, ConfigurationError, get_db
from .logging_service import LoggingService

__all__ = [
    'Config', 'get_config_value', 'ShowcaseDatabase', 'ProjectStatus',
    'ConfigurationError', 'get_db', 'LoggingService',
]
