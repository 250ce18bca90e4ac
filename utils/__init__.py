"""Utilities and helper functions.

- exceptions: Exception hierarchy
- ids: Identifier generation for new titles
- logging: loguru setup and get_logger()
- persistence: JSON file store
"""

from utils import exceptions, ids, logging, persistence

__all__ = ["exceptions", "ids", "logging", "persistence"]
