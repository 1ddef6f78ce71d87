"""Convolut MCP server.

Exposes the Convolut context API (CRUD, search, AI consolidation and
planning, export, statistics) as Model Context Protocol tools over stdio.
"""

__version__ = "1.0.0"
