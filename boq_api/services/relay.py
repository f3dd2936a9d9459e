"""Relay handlers — validate a request, forward it to the AI service once, relay the result.

Every relay endpoint follows the same contract:

  - only ``POST`` is accepted (405 + ``Allow: POST`` otherwise)
  - the body must be a JSON object matching the endpoint's request envelope
    (400 with the endpoint's "Missing ..." message otherwise)
  - the AI operation is awaited exactly once; its result is relayed verbatim
    with 200, any exception becomes 500 ``{message}`` and is logged

Handlers talk to HTTP only through :class:`~boq_api.core.http.HttpExchange`,
so nothing here depends on FastAPI.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from boq_api.core.exceptions import (
    AppException,
    InvalidRequestError,
    MethodNotAllowedError,
    describe_failure,
)
from boq_api.core.http import HttpExchange
from boq_api.schemas.boq import (
    BoqGenerationRequest,
    BoqRefinementRequest,
    ProductLookupRequest,
)
from boq_api.services.ai_service import AICollaborator

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT", bound=BaseModel)

ALLOWED_METHODS: list[str] = ["POST"]
INVALID_JSON_MESSAGE = "Request body must be valid JSON."


class RelayHandler(Generic[RequestT]):
    """Relays one kind of request envelope to one AI operation."""

    def __init__(
        self,
        endpoint: str,
        request_model: type[RequestT],
        missing_message: str,
        invoke: Callable[[RequestT], Awaitable[Any]],
        max_body_size: int | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.request_model = request_model
        self.missing_message = missing_message
        self._invoke = invoke
        self._max_body_size = max_body_size

    async def handle(self, exchange: HttpExchange) -> None:
        try:
            request = await self._validate(exchange)
        except AppException as exc:
            if isinstance(exc, MethodNotAllowedError):
                exchange.set_header("Allow", ", ".join(exc.allowed))
            self._respond(exchange, exc.status_code, {"message": exc.message})
            return

        try:
            payload = await self._invoke(request)
        except Exception as exc:
            logger.exception("Error in %s", self.endpoint)
            self._respond(exchange, 500, {"message": describe_failure(exc)})
            return

        self._respond(exchange, 200, payload)

    async def _validate(self, exchange: HttpExchange) -> RequestT:
        """Return the typed request envelope or raise a 405/400 ``AppException``."""
        if exchange.method.upper() not in ALLOWED_METHODS:
            raise MethodNotAllowedError(exchange.method, ALLOWED_METHODS)

        body = await exchange.read_body()
        if self._max_body_size is not None and len(body) > self._max_body_size:
            raise InvalidRequestError(
                f"Request body exceeds the {self._max_body_size // 1024}KB limit."
            )

        try:
            data = json.loads(body)
        except ValueError as exc:
            raise InvalidRequestError(INVALID_JSON_MESSAGE) from exc

        if not isinstance(data, dict):
            raise InvalidRequestError(self.missing_message)
        try:
            return self.request_model.model_validate(data)
        except ValidationError as exc:
            logger.debug("Rejected %s body: %s", self.endpoint, exc.errors())
            raise InvalidRequestError(self.missing_message) from exc

    @staticmethod
    def _respond(exchange: HttpExchange, status_code: int, payload: Any) -> None:
        exchange.set_status(status_code)
        exchange.write_json(payload)


# ---------------------------------------------------------------------------
# One relay per AI operation
# ---------------------------------------------------------------------------

def product_lookup_relay(
    ai: AICollaborator, max_body_size: int | None = None
) -> RelayHandler[ProductLookupRequest]:
    return RelayHandler(
        endpoint="/api/fetch-product-details",
        request_model=ProductLookupRequest,
        missing_message='Missing "productName" in request body.',
        invoke=lambda req: ai.fetch_product_details(req.product_name),
        max_body_size=max_body_size,
    )


def boq_generation_relay(
    ai: AICollaborator, max_body_size: int | None = None
) -> RelayHandler[BoqGenerationRequest]:
    return RelayHandler(
        endpoint="/api/generate-boq",
        request_model=BoqGenerationRequest,
        missing_message='Missing "requirements" in request body.',
        invoke=lambda req: ai.generate_boq(req.requirements),
        max_body_size=max_body_size,
    )


def boq_refinement_relay(
    ai: AICollaborator, max_body_size: int | None = None
) -> RelayHandler[BoqRefinementRequest]:
    return RelayHandler(
        endpoint="/api/refine-boq",
        request_model=BoqRefinementRequest,
        missing_message='Missing "currentBoq" or "refinementPrompt" in request body.',
        invoke=lambda req: ai.refine_boq(req.current_boq, req.refinement_prompt),
        max_body_size=max_body_size,
    )


PRODUCT_LOOKUP = "product_lookup"
BOQ_GENERATION = "boq_generation"
BOQ_REFINEMENT = "boq_refinement"


def build_relays(
    ai: AICollaborator, max_body_size: int | None = None
) -> dict[str, RelayHandler]:
    """Build every relay once, keyed by operation, for ``app.state.relays``."""
    return {
        PRODUCT_LOOKUP: product_lookup_relay(ai, max_body_size),
        BOQ_GENERATION: boq_generation_relay(ai, max_body_size),
        BOQ_REFINEMENT: boq_refinement_relay(ai, max_body_size),
    }
