"""Request envelopes for the relay endpoints.

Product details and BOQs are produced by the AI service and relayed to the
client untouched, so they are typed only as JSON containers here.
"""

from typing import Any, Union

from pydantic import Field, field_validator

from boq_api.schemas.common import CamelModel

ProductDetails = dict[str, Any]
Boq = Union[dict[str, Any], list[Any]]


class ProductLookupRequest(CamelModel):
    product_name: str = Field(min_length=1)


class BoqGenerationRequest(CamelModel):
    requirements: str = Field(min_length=1)


class BoqRefinementRequest(CamelModel):
    current_boq: Boq
    refinement_prompt: str = Field(min_length=1)

    @field_validator("current_boq")
    @classmethod
    def _boq_not_empty(cls, value: Boq) -> Boq:
        if not value:
            raise ValueError("currentBoq must not be empty")
        return value
