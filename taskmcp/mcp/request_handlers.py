"""Request handlers for JSON-RPC messages received by the stdio proxy."""

import json
import logging
import traceback
from typing import Dict, Any, Optional

from taskmcp import __version__
from taskmcp.mcp.client import TaskServiceClient
from taskmcp.mcp.functions import MCP_TOOLS, DEFAULT_PAGE, DEFAULT_PAGE_SIZE

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "task-manager-mcp"

METHOD_NOT_FOUND = -32601
SERVER_ERROR = -32000


class UnknownToolError(Exception):
    """tools/call named a tool the proxy does not expose."""

    def __init__(self, tool_name: Any):
        super().__init__(f"Unknown tool: {tool_name}")
        self.tool_name = tool_name


def call_tool(client: TaskServiceClient, tool_name: str, arguments: Dict[str, Any]) -> Any:
    """
    Forward one tool call to the task service.

    Returns:
        Decoded JSON body of the HTTP response
    """
    if tool_name == "get_task_schema":
        return client.get_task_schema()
    if tool_name == "insert_tasks":
        return client.insert_tasks(arguments.get("tasks") or [])
    if tool_name == "get_tasks_summary":
        return client.get_tasks_summary()
    if tool_name == "get_all_tasks":
        page = arguments.get("page") or DEFAULT_PAGE
        size = arguments.get("size") or DEFAULT_PAGE_SIZE
        return client.get_all_tasks(page, size)
    if tool_name == "get_help":
        return client.get_help()
    raise UnknownToolError(tool_name)


def _result(jsonrpc: str, request_id: Any, result: Dict[str, Any]) -> Dict[str, Any]:
    return {"jsonrpc": jsonrpc, "id": request_id, "result": result}


def _error(jsonrpc: str, request_id: Any, code: int, message: str, data: Any = None) -> Dict[str, Any]:
    error: Dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": jsonrpc, "id": request_id, "error": error}


def handle_jsonrpc_request(request: Dict[str, Any], client: TaskServiceClient) -> Optional[Dict[str, Any]]:
    """
    Handle JSON-RPC 2.0 request.

    Args:
        request: JSON-RPC request dictionary
        client: Client for the task service

    Returns:
        JSON-RPC response dictionary, or None for notifications
    """
    jsonrpc = request.get("jsonrpc", "2.0")
    request_id = request.get("id")
    method = request.get("method")
    params = request.get("params") or {}

    if isinstance(method, str) and method.startswith("notifications/"):
        logger.info(f"Received notification: {method}")
        return None
    if "id" not in request:
        logger.info(f"Ignoring notification without id: {method}")
        return None

    try:
        if method == "initialize":
            return _result(jsonrpc, request_id, {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {"tools": {}},
                "serverInfo": {"name": SERVER_NAME, "version": __version__},
            })
        elif method == "tools/list":
            return _result(jsonrpc, request_id, {"tools": MCP_TOOLS})
        elif method == "tools/call":
            tool_name = params.get("name")
            arguments = params.get("arguments") or {}
            logger.info(f"Handling tools/call: {tool_name}")
            data = call_tool(client, tool_name, arguments)
            return _result(jsonrpc, request_id, {
                "content": [{"type": "text", "text": json.dumps(data, indent=2)}]
            })

        logger.warning(f"Unknown method: {method}")
        return _error(jsonrpc, request_id, METHOD_NOT_FOUND, f"Method not found: {method}")
    except Exception as e:
        logger.error(f"Error handling {method}: {e}", exc_info=True)
        return _error(jsonrpc, request_id, SERVER_ERROR, str(e), data={"stack": traceback.format_exc()})
