"""Optional integrations. ``toolbridge.ext.mcp`` bridges remote MCP tool servers."""
