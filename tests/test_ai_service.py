"""Tests for ``ProcurementAIService`` with the OpenAI client mocked out."""

from __future__ import annotations

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from openai import OpenAIError

from boq_api.core.config import Settings
from boq_api.core.exceptions import CollaboratorError
from boq_api.services.ai_service import (
    BOQ_GENERATION_PROMPT,
    BOQ_REFINEMENT_PROMPT,
    PRODUCT_DETAILS_PROMPT,
    ProcurementAIService,
)


def _completion(content: str | None) -> SimpleNamespace:
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _service(create: AsyncMock) -> ProcurementAIService:
    client = MagicMock()
    client.chat.completions.create = create
    return ProcurementAIService(api_key=None, model="gpt-test", max_tokens=123, client=client)


class TestOperations:
    async def test_fetch_product_details(self):
        create = AsyncMock(return_value=_completion('{"name": "steel rebar", "unit": "kg"}'))
        service = _service(create)

        details = await service.fetch_product_details("steel rebar")

        assert details == {"name": "steel rebar", "unit": "kg"}
        kwargs = create.await_args.kwargs
        assert kwargs["model"] == "gpt-test"
        assert kwargs["max_completion_tokens"] == 123
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"][0] == {"role": "system", "content": PRODUCT_DETAILS_PROMPT}
        assert "steel rebar" in kwargs["messages"][1]["content"]

    async def test_generate_boq(self):
        create = AsyncMock(return_value=_completion('{"items": []}'))
        service = _service(create)

        boq = await service.generate_boq("Two bedroom apartment rewiring")

        assert boq == {"items": []}
        messages = create.await_args.kwargs["messages"]
        assert messages[0]["content"] == BOQ_GENERATION_PROMPT
        assert "Two bedroom apartment rewiring" in messages[1]["content"]

    async def test_refine_boq_sends_current_boq(self):
        current = {"items": [{"description": "Socket outlet", "quantity": 12}]}
        create = AsyncMock(return_value=_completion('{"items": [{"quantity": 14}]}'))
        service = _service(create)

        await service.refine_boq(current, "Add two outlets in the kitchen")

        messages = create.await_args.kwargs["messages"]
        assert messages[0]["content"] == BOQ_REFINEMENT_PROMPT
        assert json.dumps(current, indent=2) in messages[1]["content"]
        assert "Add two outlets in the kitchen" in messages[1]["content"]


class TestFailures:
    async def test_sdk_error_is_translated(self):
        service = _service(AsyncMock(side_effect=OpenAIError("rate limited")))

        with pytest.raises(CollaboratorError, match="OpenAI service error: rate limited") as exc_info:
            await service.generate_boq("Shed")

        assert isinstance(exc_info.value.__cause__, OpenAIError)

    async def test_empty_completion(self):
        service = _service(AsyncMock(return_value=_completion(None)))

        with pytest.raises(CollaboratorError, match="Empty response from OpenAI"):
            await service.fetch_product_details("gravel")

    async def test_invalid_json(self):
        service = _service(AsyncMock(return_value=_completion("Sure! Here is your BOQ")))

        with pytest.raises(CollaboratorError, match="Invalid JSON response"):
            await service.generate_boq("Shed")

    async def test_missing_api_key(self):
        service = ProcurementAIService(api_key=None)

        with pytest.raises(CollaboratorError, match="OPENAI_API_KEY"):
            await service.generate_boq("Shed")


class TestFromSettings:
    def test_configuration_is_injected(self):
        settings = Settings(
            _env_file=None,
            OPENAI_API_KEY="sk-test-not-real",
            OPENAI_MODEL="gpt-4.1",
            OPENAI_MAX_TOKENS=900,
            OPENAI_TIMEOUT=15,
        )

        service = ProcurementAIService.from_settings(settings)

        assert service.client is not None
        assert service.model == "gpt-4.1"
        assert service.max_tokens == 900

    def test_no_client_without_key(self):
        settings = Settings(_env_file=None, OPENAI_API_KEY=None)

        assert ProcurementAIService.from_settings(settings).client is None
