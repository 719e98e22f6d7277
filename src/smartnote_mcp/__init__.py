"""MCP tool server for Smart Note."""
