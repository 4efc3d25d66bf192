"""Core domain package for sitewire.

Core holds the session lifecycle, group resolution, message normalization,
notifications and tool dispatch without any Telegram, MCP or storage-specific
code, keeping the business logic portable.
"""
