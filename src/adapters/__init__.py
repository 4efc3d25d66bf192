"""Integration adapters: Telegram channel, SQLite storage and the MCP transport."""
