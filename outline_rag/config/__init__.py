"""Configuration module -- exports Settings.

Settings are built by the entry points (CLI, MCP server) through
``load_settings``, never at import time.
"""

from outline_rag.config.settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]
