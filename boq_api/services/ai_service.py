"""Procurement AI service — OpenAI-powered product lookup and BOQ authoring.

Provides three capabilities, one per relay endpoint:
1. **Product lookup** — Describes a named product (category, unit, typical
   specification and price range) as a JSON object.
2. **BOQ generation** — Turns free-text project requirements into a Bill of
   Quantities.
3. **BOQ refinement** — Applies a natural-language change request to an
   existing Bill of Quantities and returns the full revised BOQ.

Every failure (SDK error, empty completion, invalid JSON, missing API key) is
raised as :class:`CollaboratorError`; callers never see OpenAI exception types.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Dict, Optional, Protocol

from openai import AsyncOpenAI, OpenAIError

from boq_api.core.exceptions import CollaboratorError
from boq_api.schemas.boq import Boq, ProductDetails

if TYPE_CHECKING:
    from boq_api.core.config import Settings

logger = logging.getLogger(__name__)


class AICollaborator(Protocol):
    """The three AI operations the relay endpoints forward to."""

    async def fetch_product_details(self, product_name: str) -> ProductDetails: ...

    async def generate_boq(self, requirements: str) -> Boq: ...

    async def refine_boq(self, current_boq: Boq, refinement_prompt: str) -> Boq: ...


# ── System prompts ────────────────────────────────────────────────────────

_BOQ_SCHEMA = """{
  "projectName": "<short project title>",
  "currency": "<ISO 4217 code, e.g. USD>",
  "items": [
    {
      "category": "<trade or system, e.g. Structural, Electrical>",
      "description": "<item description>",
      "brand": "<suggested brand or null>",
      "model": "<suggested model / specification or null>",
      "quantity": <number>,
      "unit": "<unit of measure, e.g. kg, m, pcs>",
      "unitPrice": <number or null>,
      "totalPrice": <number or null>
    }
  ],
  "notes": ["<assumptions made while preparing the BOQ>"]
}"""

PRODUCT_DETAILS_PROMPT = """You are a procurement specialist with broad knowledge of construction, electrical, mechanical and IT products.

Given a product name, describe the product a buyer would most likely mean.

Output ONLY valid JSON matching this schema:

{
  "name": "<canonical product name>",
  "category": "<product category>",
  "unit": "<unit of measure the product is usually bought in>",
  "description": "<one or two sentence description>",
  "specifications": {"<attribute>": "<value>"},
  "brands": ["<common manufacturers>"],
  "priceRange": {"min": <number or null>, "max": <number or null>, "currency": "<ISO 4217 code>"}
}

## Rules
1. Output ONLY valid JSON — no markdown, no commentary.
2. If a value cannot be determined, set it to null."""

BOQ_GENERATION_PROMPT = f"""You are an experienced quantity surveyor.

Prepare a Bill of Quantities (BOQ) for the project requirements provided by the user.

Output ONLY valid JSON matching this schema:

{_BOQ_SCHEMA}

## Rules
1. Output ONLY valid JSON — no markdown, no commentary.
2. Group items by category and list every material or equipment item the requirements imply.
3. totalPrice must equal quantity × unitPrice whenever both are known.
4. Record every assumption in "notes"."""

BOQ_REFINEMENT_PROMPT = f"""You are an experienced quantity surveyor.

You will receive an existing Bill of Quantities (BOQ) as JSON and a change request.
Apply the change request and return the COMPLETE revised BOQ, not just the changed items.

Output ONLY valid JSON matching this schema:

{_BOQ_SCHEMA}

## Rules
1. Output ONLY valid JSON — no markdown, no commentary.
2. Keep every item the change request does not affect exactly as it was.
3. totalPrice must equal quantity × unitPrice whenever both are known.
4. Append a note describing each change made."""


class ProcurementAIService:
    """Thin async wrapper around OpenAI for product lookup and BOQ authoring."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gpt-4.1-mini",
        max_tokens: int = 4000,
        timeout: int = 60,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        if client is None and api_key:
            client = AsyncOpenAI(api_key=api_key, timeout=timeout)
        self.client = client
        self.model = model
        self.max_tokens = max_tokens

    @classmethod
    def from_settings(cls, settings: Settings) -> ProcurementAIService:
        return cls(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            max_tokens=settings.openai_max_tokens,
            timeout=settings.openai_timeout,
        )

    # ── Core OpenAI call ──────────────────────────────────────────────────

    async def _call_openai(
        self, operation: str, system_prompt: str, user_message: str
    ) -> Dict[str, Any]:
        """Send an async request to OpenAI and return parsed JSON."""
        if self.client is None:
            raise CollaboratorError(
                "OpenAI API key is not configured. Set OPENAI_API_KEY in your .env file."
            )
        try:
            logger.info(
                "Calling OpenAI operation=%s model=%s, input_length=%d",
                operation,
                self.model,
                len(user_message),
            )
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_message},
                ],
                max_completion_tokens=self.max_tokens,
                response_format={"type": "json_object"},
            )

            content = response.choices[0].message.content
            if not content:
                raise CollaboratorError("Empty response from OpenAI")

            logger.info("OpenAI call successful operation=%s", operation)
            return json.loads(content)

        except OpenAIError as exc:
            logger.error("OpenAI API error: %s", exc)
            raise CollaboratorError(f"OpenAI service error: {exc}") from exc
        except json.JSONDecodeError as exc:
            logger.error("Invalid JSON from OpenAI: %s", exc)
            raise CollaboratorError(f"Invalid JSON response: {exc}") from exc

    # ── Public methods ────────────────────────────────────────────────────

    async def fetch_product_details(self, product_name: str) -> ProductDetails:
        return await self._call_openai(
            "fetch_product_details",
            PRODUCT_DETAILS_PROMPT,
            f"Product name: {product_name}",
        )

    async def generate_boq(self, requirements: str) -> Boq:
        return await self._call_openai(
            "generate_boq",
            BOQ_GENERATION_PROMPT,
            f"Project requirements:\n{requirements}",
        )

    async def refine_boq(self, current_boq: Boq, refinement_prompt: str) -> Boq:
        """Apply *refinement_prompt* to *current_boq*.

        The current BOQ is sent as pretty-printed JSON so the model can copy
        untouched items through verbatim.
        """
        user_message = (
            f"Current BOQ:\n{json.dumps(current_boq, indent=2, default=str)}"
            f"\n\nChange request:\n{refinement_prompt}"
        )
        return await self._call_openai(
            "refine_boq", BOQ_REFINEMENT_PROMPT, user_message
        )
