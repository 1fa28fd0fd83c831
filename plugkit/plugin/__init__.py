"""
plugkit Plugin System - plugin contract, resolution and lifecycle management.

This module handles:
- The Plugin contract (register / optional deregister)
- Identifier resolution to plugin factories
- Sequential loading, registry and unloading
"""

__all__ = []
