"""Shared pytest fixtures for the BOQ API test suite.

Provides an in-memory AI collaborator with per-operation call counters, test
settings, and a FastAPI app wired to both.  Nothing here touches the network
or needs an OpenAI key.
"""

from __future__ import annotations

from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from boq_api.core.config import Settings
from boq_api.main import create_app


SAMPLE_BOQ: dict[str, Any] = {
    "projectName": "Warehouse slab",
    "currency": "USD",
    "items": [
        {
            "category": "Structural",
            "description": "Steel rebar, 12 mm",
            "brand": None,
            "model": "ASTM A615 Grade 60",
            "quantity": 1250,
            "unit": "kg",
            "unitPrice": 1.15,
            "totalPrice": 1437.5,
        },
    ],
    "notes": ["Slab thickness assumed 200 mm"],
}


class FakeCollaborator:
    """Stand-in for ``ProcurementAIService`` that records every call.

    Set ``results[op]`` to change what an operation returns, or
    ``errors[op]`` to make it raise.
    """

    def __init__(self) -> None:
        self.calls: dict[str, list[tuple]] = {
            "fetch_product_details": [],
            "generate_boq": [],
            "refine_boq": [],
        }
        self.results: dict[str, Any] = {
            "fetch_product_details": {"name": "steel rebar", "unit": "kg"},
            "generate_boq": SAMPLE_BOQ,
            "refine_boq": SAMPLE_BOQ,
        }
        self.errors: dict[str, BaseException] = {}

    @property
    def call_count(self) -> int:
        return sum(len(calls) for calls in self.calls.values())

    def _answer(self, operation: str, *args: Any) -> Any:
        self.calls[operation].append(args)
        if operation in self.errors:
            raise self.errors[operation]
        return self.results[operation]

    async def fetch_product_details(self, product_name: str) -> Any:
        return self._answer("fetch_product_details", product_name)

    async def generate_boq(self, requirements: str) -> Any:
        return self._answer("generate_boq", requirements)

    async def refine_boq(self, current_boq: Any, refinement_prompt: str) -> Any:
        return self._answer("refine_boq", current_boq, refinement_prompt)


@pytest.fixture
def sample_boq() -> dict[str, Any]:
    return SAMPLE_BOQ


@pytest.fixture
def collaborator() -> FakeCollaborator:
    return FakeCollaborator()


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(
        _env_file=None,
        app_env="test",
        frontend_url="http://localhost:3000",
        max_body_size_kb=4,
    )


@pytest.fixture
def app(settings: Settings, collaborator: FakeCollaborator) -> FastAPI:
    return create_app(settings=settings, ai_service=collaborator)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
