"""Async client for the BOQ relay endpoints.

Callers see a single exception type, :class:`BoqApiError`, whatever went
wrong: a ``{message}`` error response from the relay, an unparsable error
body, or a transport failure.  Only the message (and the HTTP status, when
there was one) is exposed.

Usage::

    async with BoqApiClient("https://boq.example.com") as api:
        boq = await api.generate_boq("Two-storey office, 400 m², LED lighting")
        boq = await api.refine_boq(boq, "Switch all luminaires to DALI dimmable")
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from boq_api.schemas.boq import Boq, ProductDetails

logger = logging.getLogger(__name__)

UNKNOWN_ERROR_MESSAGE = "An unknown API error occurred."
EMPTY_ERROR_MESSAGE = "Failed to fetch from the API."


class BoqApiError(Exception):
    """Raised for every failed call to the relay endpoints."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return UNKNOWN_ERROR_MESSAGE
    message = data.get("message") if isinstance(data, dict) else None
    return str(message) if message else EMPTY_ERROR_MESSAGE


class BoqApiClient:
    """Thin async wrapper around ``httpx.AsyncClient`` for the three relays.

    Pass *transport* (e.g. ``httpx.MockTransport``) or a ready-made *client*
    to substitute the network layer.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        timeout: float = 90.0,
        transport: httpx.AsyncBaseTransport | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> BoqApiClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _post(self, path: str, body: dict[str, Any]) -> Any:
        """POST *body* as JSON to *path* and return the decoded JSON response."""
        try:
            response = await self._client.post(
                path, json=body, headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as exc:
            logger.warning("Request to %s failed: %s", path, exc)
            raise BoqApiError(str(exc) or UNKNOWN_ERROR_MESSAGE) from exc

        if not response.is_success:
            raise BoqApiError(_error_message(response), response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise BoqApiError(UNKNOWN_ERROR_MESSAGE, response.status_code) from exc

    # ── Relay operations ──────────────────────────────────────────────────

    async def generate_boq(self, requirements: str) -> Boq:
        return await self._post("/api/generate-boq", {"requirements": requirements})

    async def refine_boq(self, current_boq: Boq, refinement_prompt: str) -> Boq:
        return await self._post(
            "/api/refine-boq",
            {"currentBoq": current_boq, "refinementPrompt": refinement_prompt},
        )

    async def fetch_product_details(self, product_name: str) -> ProductDetails:
        return await self._post(
            "/api/fetch-product-details", {"productName": product_name}
        )
