"""Utility functions and helpers for the LivePoll server"""
from .path_config import (
    get_app_root,
    get_config_dir,
    get_logs_dir,
    get_server_config_file
)
from .config_loader import ConfigManager, DEFAULT_CONFIG
from .event_utils import EventType
from .message_utils import MessageType

__all__ = [
    'get_app_root',
    'get_config_dir',
    'get_logs_dir',
    'get_server_config_file',
    'ConfigManager',
    'DEFAULT_CONFIG',
    'EventType',
    'MessageType'
]
