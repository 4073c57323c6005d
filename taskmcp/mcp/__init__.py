"""
MCP stdio proxy: forwards JSON-RPC tool calls to the task REST service.
"""
