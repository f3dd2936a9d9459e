"""Services package — all relay and AI logic lives here, never in routers.

Files:
  ai_service.py  — OpenAI product lookup and BOQ generation/refinement (the AI collaborator)
  relay.py       — framework-neutral relay handlers used by /api/* routes

Rule: routers adapt HTTP, relays validate and forward, the AI service talks to OpenAI.
      No FastAPI imports in services beyond the HttpExchange adapter.
"""
