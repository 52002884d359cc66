"""Dynamics 365 Web API query assistant: shorthand commands, Portuguese
natural-language queries, an interactive query builder and a metadata
explorer, exposed as MCP tools."""

__version__ = "0.1.0"
