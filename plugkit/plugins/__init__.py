"""
plugkit built-in plugins.

- logger: writes messages to a named logger at a configured level
"""

__all__ = []
