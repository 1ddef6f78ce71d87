"""MCP server for Convolut integration.

This package provides a Model Context Protocol (MCP) server that exposes
Convolut API endpoints as tools, so MCP clients can manage, search,
consolidate and export a user's contexts.
"""
