"""
HTTP client for the task REST service, used by the MCP proxy.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8080/mcp"
DEFAULT_TIMEOUT = 30.0
PROBE_TIMEOUT = 5.0


class TaskServiceHTTPError(Exception):
    """The task service answered with a non-2xx status."""

    def __init__(self, status_code: int, text: str):
        super().__init__(f"HTTP {status_code}: {text}")
        self.status_code = status_code
        self.text = text


class TaskServiceClient:
    """Synchronous client for the /mcp endpoints."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Args:
            base_url: Base URL of the MCP endpoints (e.g. http://localhost:8080/mcp)
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        self.base_url = base_url
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "TaskServiceClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def request(
        self,
        method: str,
        endpoint: str,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Send a request and return the decoded JSON body.

        Raises:
            TaskServiceHTTPError: If the response status is not 2xx
            httpx.HTTPError: On transport failures and timeouts
        """
        logger.info(f"Calling: {method} {self.base_url}{endpoint}")
        response = self._client.request(method, endpoint, json=json, params=params)
        logger.info(f"Response status: {response.status_code} {response.reason_phrase}")

        if not response.is_success:
            logger.warning(f"Error response: {response.text}")
            raise TaskServiceHTTPError(response.status_code, response.text)
        return response.json()

    def get_task_schema(self) -> Dict[str, Any]:
        return self.request("GET", "/schema/tasks")

    def insert_tasks(self, tasks: List[Dict[str, Any]]) -> Dict[str, Any]:
        return self.request("POST", "/tasks", json=tasks)

    def get_tasks_summary(self) -> Dict[str, Any]:
        return self.request("GET", "/tasks/summary")

    def get_all_tasks(self, page: int, size: int) -> Dict[str, Any]:
        return self.request("GET", "/tasks", params={"page": page, "size": size})

    def get_help(self) -> Dict[str, Any]:
        return self.request("GET", "/help")

    def probe(self) -> bool:
        """Check once that the service answers GET /help. Never raises."""
        try:
            response = self._client.get("/help", timeout=PROBE_TIMEOUT)
        except httpx.HTTPError as e:
            logger.warning(f"Server connectivity test failed: {e}")
            return False
        if response.is_success:
            logger.info("Server is reachable")
            return True
        logger.warning(f"Server returned status: {response.status_code}")
        return False
