"""
RestGate — Test Configuration (conftest.py)
=============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── demo_router:  Router exercising every failure shape the pipeline handles
    ├── make_client:  Factory for HTTPX AsyncClients bound to an app per mode
    ├── client:       AsyncClient for a test-mode app
    ├── dev_client:   AsyncClient for a development-mode app
    └── prod_client:  AsyncClient for a production-mode app
"""

import os
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict

import pytest
import pytest_asyncio
from fastapi import APIRouter, Depends, HTTPException, Response
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel, Field

from restgate.config import Environment, Settings
from restgate.dependencies import decoded_body
from restgate.exceptions import APIError, FieldErrors, ValidationFailure

# Override settings for testing BEFORE any app imports
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"


class Item(BaseModel):
    name: str
    price: float = Field(gt=0)


class ConflictError(Exception):
    """Plain exception carrying its own status and publicness."""

    status = 409
    is_public = True


def build_demo_router() -> APIRouter:
    router = APIRouter()

    @router.post("/items", status_code=201)
    async def create_item(item: Item) -> Dict[str, Any]:
        return item.model_dump()

    @router.delete("/items/{item_id}")
    async def delete_item(item_id: int) -> Dict[str, Any]:
        return {"deleted": item_id}

    @router.get("/boom")
    async def boom() -> None:
        raise RuntimeError("connection string postgres://admin:hunter2@db")

    @router.get("/teapot")
    async def teapot() -> None:
        raise APIError("Short and stout", 418, is_public=True)

    @router.get("/private")
    async def private() -> None:
        raise APIError("upstream quota exhausted for tenant 42", 503)

    @router.get("/missing")
    async def missing() -> None:
        raise HTTPException(status_code=404, detail="Item not found")

    @router.get("/unauthorized")
    async def unauthorized() -> None:
        raise HTTPException(
            status_code=401,
            detail="Token expired",
            headers={"WWW-Authenticate": "Bearer"},
        )

    @router.get("/conflict")
    async def conflict() -> None:
        raise ConflictError("Item already exists")

    @router.get("/checked")
    async def checked() -> None:
        raise ValidationFailure(
            [
                FieldErrors("email", ["is required", "must be an email"]),
                FieldErrors("age", ["must be a number"]),
            ]
        )

    @router.post("/echo")
    async def echo(body: Dict[str, Any] = Depends(decoded_body)) -> Dict[str, Any]:
        return body

    @router.get("/large")
    async def large() -> Dict[str, Any]:
        return {"data": "x" * 5000}

    @router.get("/powered")
    async def powered() -> Response:
        return Response(content="ok", headers={"X-Powered-By": "Express"})

    return router


@pytest.fixture
def demo_router() -> APIRouter:
    """Router mounted under /api by every client fixture."""
    return build_demo_router()


@pytest.fixture
def make_client(demo_router):
    """
    Provides a factory for async HTTP test clients.

    Usage:
        async with make_client(Environment.PRODUCTION) as client:
            response = await client.get("/api/health-check")
    """
    from restgate.main import create_app

    @asynccontextmanager
    async def _make(environment: Environment = Environment.TEST, **overrides) -> AsyncGenerator[AsyncClient, None]:
        settings = Settings(environment=environment, **overrides)
        app = create_app(settings, api_router=demo_router_with_health(demo_router))
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client

    return _make


def demo_router_with_health(demo_router: APIRouter) -> APIRouter:
    from restgate.routes import health

    router = APIRouter()
    router.include_router(health.router)
    router.include_router(demo_router)
    return router


@pytest_asyncio.fixture
async def client(make_client):
    async with make_client(Environment.TEST) as c:
        yield c


@pytest_asyncio.fixture
async def dev_client(make_client):
    async with make_client(Environment.DEVELOPMENT) as c:
        yield c


@pytest_asyncio.fixture
async def prod_client(make_client):
    async with make_client(Environment.PRODUCTION) as c:
        yield c
