"""
MCP stdio proxy.

Reads line-delimited JSON-RPC 2.0 messages from stdin, forwards tool calls
to the task REST service over HTTP and writes responses to stdout. Logs go
to stderr and to an append-mode log file; stdout carries protocol messages only.

Configuration:
    TASKMCP_BASE_URL        Base URL of the /mcp endpoints
    TASKMCP_PROXY_TIMEOUT   HTTP timeout in seconds
    TASKMCP_PROXY_LOG_FILE  Log file path
    LOG_LEVEL               Log level
"""
import os
import sys
import json
import signal
import logging
from typing import TextIO

from taskmcp.mcp.client import TaskServiceClient, DEFAULT_BASE_URL, DEFAULT_TIMEOUT
from taskmcp.mcp.functions import MCP_TOOLS
from taskmcp.mcp.request_handlers import handle_jsonrpc_request

logger = logging.getLogger("taskmcp.mcp.proxy")

DEFAULT_LOG_FILE = "mcp-proxy.log"
PROXY_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_proxy_logging(log_file: str, level: str = "INFO") -> None:
    """Send log records to stderr and to log_file, never to stdout."""
    formatter = logging.Formatter(PROXY_LOG_FORMAT)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(formatter)
    file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    file_handler.setFormatter(formatter)

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=[stderr_handler, file_handler],
        force=True
    )


def serve(client: TaskServiceClient, stdin: TextIO, stdout: TextIO) -> None:
    """
    Process messages until stdin reaches EOF.

    Unparseable lines are logged and skipped. Every response is written as a
    single line and flushed immediately.
    """
    for line in stdin:
        line = line.strip()
        if not line:
            continue
        logger.debug(f"Received line: {line[:200]}")

        try:
            message = json.loads(line)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse JSON: {e}")
            continue
        if not isinstance(message, dict):
            logger.error("Ignoring message that is not a JSON object")
            continue

        response = handle_jsonrpc_request(message, client)
        if response is None:
            continue
        stdout.write(json.dumps(response) + "\n")
        stdout.flush()

    logger.info("Input closed")


def _handle_sigterm(signum, frame):
    logger.info("Received SIGTERM, shutting down gracefully")
    raise SystemExit(0)


def main() -> int:
    """Entry point for the taskmcp-proxy command."""
    setup_proxy_logging(
        os.getenv("TASKMCP_PROXY_LOG_FILE", DEFAULT_LOG_FILE),
        os.getenv("LOG_LEVEL", "INFO"),
    )
    base_url = os.getenv("TASKMCP_BASE_URL", DEFAULT_BASE_URL)
    timeout = float(os.getenv("TASKMCP_PROXY_TIMEOUT", str(DEFAULT_TIMEOUT)))

    logger.info("=== MCP Proxy Starting ===")
    logger.info(f"Base URL: {base_url}")
    logger.info(f"Tools defined: {len(MCP_TOOLS)}")

    signal.signal(signal.SIGTERM, _handle_sigterm)

    with TaskServiceClient(base_url, timeout=timeout) as client:
        client.probe()
        logger.info("=== MCP Proxy Ready ===")
        try:
            serve(client, sys.stdin, sys.stdout)
        except KeyboardInterrupt:
            logger.info("Received SIGINT, shutting down gracefully")
    return 0


if __name__ == "__main__":
    sys.exit(main())
