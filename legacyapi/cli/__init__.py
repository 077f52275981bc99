"""
Command Line Interface for the Legacy API.

This module provides the main entry point for the ``legacy`` CLI.
It imports and registers all commands from the commands package.
"""
from .commands import app

__all__ = ['app']

# This allows the module to be run directly with `python -m legacyapi.cli`
if __name__ == "__main__":
    app()
