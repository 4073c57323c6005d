"""
Adapter for HTTP framework (FastAPI).
Isolates FastAPI-specific imports to make library replacement easier.
"""
from abc import ABC, abstractmethod
from typing import Callable, Any, Optional

from fastapi import FastAPI, APIRouter, HTTPException, Query, Body, Request, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response


class RouterAdapter(ABC):
    """Abstract adapter for HTTP router operations."""

    @abstractmethod
    def get(self, path: str, **kwargs) -> Callable:
        """Register a GET route."""

    @abstractmethod
    def post(self, path: str, **kwargs) -> Callable:
        """Register a POST route."""


class FastAPIRouterAdapter(RouterAdapter):
    """FastAPI implementation of RouterAdapter."""

    def __init__(self, router: APIRouter):
        self._router = router

    def get(self, path: str, **kwargs) -> Callable:
        return self._router.get(path, **kwargs)

    def post(self, path: str, **kwargs) -> Callable:
        return self._router.post(path, **kwargs)

    @property
    def router(self) -> APIRouter:
        """Get the underlying FastAPI router."""
        return self._router

    def __getattr__(self, name: str):
        """Delegate attribute access to underlying router for FastAPI compatibility."""
        return getattr(self._router, name)


class FastAPIAppAdapter:
    """Wraps a FastAPI application during assembly."""

    def __init__(self, app: FastAPI):
        self._app = app

    def include_router(self, router: Any, **kwargs) -> None:
        """Include a router, unwrapping FastAPIRouterAdapter instances."""
        if isinstance(router, FastAPIRouterAdapter):
            router = router.router
        self._app.include_router(router, **kwargs)

    def add_middleware(self, middleware_class: type, **kwargs) -> None:
        self._app.add_middleware(middleware_class, **kwargs)

    def add_exception_handler(self, exc_class: type, handler: Callable) -> None:
        self._app.add_exception_handler(exc_class, handler)

    @property
    def app(self) -> FastAPI:
        """Get the underlying FastAPI application."""
        return self._app


class HTTPFrameworkAdapter:
    """Adapter for HTTP framework operations."""

    def __init__(self):
        self.FastAPI = FastAPI
        self.APIRouter = APIRouter
        self.HTTPException = HTTPException
        self.Query = Query
        self.Body = Body
        self.Request = Request
        self.Depends = Depends
        self.RequestValidationError = RequestValidationError
        self.JSONResponse = JSONResponse
        self.Response = Response

    def create_app(self, *args, **kwargs) -> FastAPIAppAdapter:
        """Create a FastAPI application instance wrapped in an adapter."""
        return FastAPIAppAdapter(self.FastAPI(*args, **kwargs))

    def create_router(self, *args, **kwargs) -> FastAPIRouterAdapter:
        """Create an APIRouter instance wrapped in RouterAdapter."""
        return FastAPIRouterAdapter(self.APIRouter(*args, **kwargs))
