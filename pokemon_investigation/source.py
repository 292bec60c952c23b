from __future__ import annotations

import logging
from typing import Protocol

import httpx
from pydantic import ValidationError

from pokemon_investigation.config import Settings
from pokemon_investigation.errors import FetchTimeoutError, HTTPStatusError, NetworkError, RecordValidationError
from pokemon_investigation.schemas import PokemonApiResponse, PokemonRecord


logger = logging.getLogger(__name__)


class RecordSource(Protocol):
    async def fetch(self, name: str) -> PokemonRecord: ...


class PokeApiSource:
    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(
            timeout=timeout_seconds,
            transport=transport,
            follow_redirects=True,
            headers={"Accept": "application/json"},
        )

    @classmethod
    def from_settings(cls, settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None) -> PokeApiSource:
        return cls(settings.api_base_url, timeout_seconds=settings.http_timeout_seconds, transport=transport)

    async def __aenter__(self) -> PokeApiSource:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def fetch(self, name: str) -> PokemonRecord:
        url = f"{self.base_url}/{name.lower()}"
        try:
            response = await self.client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise HTTPStatusError(name, exc.response.status_code) from exc
        except httpx.TimeoutException as exc:
            raise FetchTimeoutError(f"request timeout for '{name}'", name=name) from exc
        except httpx.TransportError as exc:
            raise NetworkError(f"network error fetching '{name}'", name=name) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise RecordValidationError(name, "response body is not valid JSON") from exc

        try:
            parsed = PokemonApiResponse.model_validate(payload)
        except ValidationError as exc:
            raise RecordValidationError(name, f"{exc.error_count()} invalid field(s)") from exc

        logger.debug("pokemon fetched", extra={"pokemon": name, "status_code": response.status_code})
        return parsed.to_record()
