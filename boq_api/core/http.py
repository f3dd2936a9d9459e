"""Minimal request/response interface the relay handlers are written against.

Handlers only need to read the method and body of a request and to write a
status, headers and a JSON body back.  ``HttpExchange`` captures exactly that,
so the same handler runs under FastAPI (via :class:`StarletteExchange`), a
serverless runtime, or an in-memory test double.
"""

from __future__ import annotations

from typing import Any, Protocol

from fastapi import Request
from fastapi.responses import JSONResponse


class HttpExchange(Protocol):
    """One in-flight request and the response being built for it."""

    @property
    def method(self) -> str: ...

    async def read_body(self) -> bytes: ...

    def set_status(self, status_code: int) -> None: ...

    def set_header(self, name: str, value: str) -> None: ...

    def write_json(self, payload: Any) -> None: ...


class StarletteExchange:
    """``HttpExchange`` adapter over a Starlette/FastAPI request."""

    def __init__(self, request: Request) -> None:
        self._request = request
        self._status_code = 200
        self._headers: dict[str, str] = {}
        self._payload: Any = None

    @property
    def method(self) -> str:
        return self._request.method

    async def read_body(self) -> bytes:
        return await self._request.body()

    def set_status(self, status_code: int) -> None:
        self._status_code = status_code

    def set_header(self, name: str, value: str) -> None:
        self._headers[name] = value

    def write_json(self, payload: Any) -> None:
        self._payload = payload

    def to_response(self) -> JSONResponse:
        return JSONResponse(
            content=self._payload,
            status_code=self._status_code,
            headers=self._headers,
        )
