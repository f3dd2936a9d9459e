"""Product lookup & BOQ relay endpoints — thin HTTP layer.

Relay logic lives in :mod:`boq_api.services.relay`.  This router only wraps
the incoming request in an :class:`HttpExchange` and turns the result back
into a response.  Each path has a documented POST route plus a hidden route
for every other standard verb, so the relay itself answers non-POST requests
with 405 and its own ``{message}`` body.
"""


from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from boq_api.core.http import StarletteExchange
from boq_api.schemas.common import ErrorResponse
from boq_api.services import relay

router = APIRouter(prefix="/api", tags=["BOQ"])

_NON_POST_METHODS: list[str] = [
    "GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE",
]
_ERROR_RESPONSES: dict = {
    400: {"model": ErrorResponse},
    405: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


# ---------------------------------------------------------------------------
# Dependencies: relays are built once by create_app()
# ---------------------------------------------------------------------------

def get_relays(request: Request) -> dict[str, relay.RelayHandler]:
    return request.app.state.relays


async def _run(request: Request, handler: relay.RelayHandler) -> JSONResponse:
    exchange = StarletteExchange(request)
    await handler.handle(exchange)
    return exchange.to_response()


# ---------------------------------------------------------------------------
# /api/fetch-product-details
# ---------------------------------------------------------------------------

@router.api_route(
    "/fetch-product-details", methods=_NON_POST_METHODS, include_in_schema=False,
)
@router.post(
    "/fetch-product-details",
    summary="Product lookup",
    responses=_ERROR_RESPONSES,
)
async def fetch_product_details(
    request: Request,
    relays: dict[str, relay.RelayHandler] = Depends(get_relays),
) -> JSONResponse:
    """Body `{ productName }` → AI-generated product details."""
    return await _run(request, relays[relay.PRODUCT_LOOKUP])


# ---------------------------------------------------------------------------
# /api/generate-boq
# ---------------------------------------------------------------------------

@router.api_route(
    "/generate-boq", methods=_NON_POST_METHODS, include_in_schema=False,
)
@router.post(
    "/generate-boq",
    summary="BOQ generation",
    responses=_ERROR_RESPONSES,
)
async def generate_boq(
    request: Request,
    relays: dict[str, relay.RelayHandler] = Depends(get_relays),
) -> JSONResponse:
    """Body `{ requirements }` → a new Bill of Quantities."""
    return await _run(request, relays[relay.BOQ_GENERATION])


# ---------------------------------------------------------------------------
# /api/refine-boq
# ---------------------------------------------------------------------------

@router.api_route(
    "/refine-boq", methods=_NON_POST_METHODS, include_in_schema=False,
)
@router.post(
    "/refine-boq",
    summary="BOQ refinement",
    responses=_ERROR_RESPONSES,
)
async def refine_boq(
    request: Request,
    relays: dict[str, relay.RelayHandler] = Depends(get_relays),
) -> JSONResponse:
    """Body `{ currentBoq, refinementPrompt }` → the revised Bill of Quantities."""
    return await _run(request, relays[relay.BOQ_REFINEMENT])
