"""
Task Manager MCP service.

REST API for bulk task insertion and analytics, plus a stdio proxy that
exposes it to MCP-capable AI agent hosts.
"""

__version__ = "1.0.0"
