"""
Core functionality for the Legacy API: settings, security primitives and
error translation.
"""
from .config import Settings, settings, get_settings
from .security import PasswordHasher, generate_session_token, token_kind

__all__ = [
    'Settings', 'settings', 'get_settings',
    'PasswordHasher', 'generate_session_token', 'token_kind',
]
