"""
plugkit Core - building blocks shared by the plugin loader.

This module contains:
- Event Bus: loaded, error and unloaded lifecycle channels
"""

__all__ = []
