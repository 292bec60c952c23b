import asyncio
from collections.abc import Callable
from pathlib import Path

import pytest

from pokemon_investigation.config import Settings
from pokemon_investigation.schemas import PokemonRecord


def build_record(name: str, types: list[str], moves: list[str], *, pokemon_id: int = 1) -> PokemonRecord:
    return PokemonRecord(
        id=pokemon_id,
        name=name,
        base_experience=100,
        height=4,
        types=tuple(types),
        moves=tuple(moves),
    )


class FakeSource:
    """In-memory record source.

    ``responses`` maps a name to a record, an exception, or a list of those
    consumed one per call. ``delays`` adds a per-name sleep before answering.
    """

    def __init__(self, responses: dict[str, object], delays: dict[str, float] | None = None) -> None:
        self.responses = responses
        self.delays = delays or {}
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch(self, name: str) -> PokemonRecord:
        self.calls.append(name)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(name, 0))
            response = self.responses[name]
            if isinstance(response, list):
                response = response.pop(0)
            if isinstance(response, Exception):
                raise response
            return response
        finally:
            self.in_flight -= 1


@pytest.fixture()
def make_record() -> Callable[..., PokemonRecord]:
    return build_record


@pytest.fixture()
def fake_source() -> Callable[..., FakeSource]:
    return FakeSource


@pytest.fixture()
def test_settings(tmp_path: Path) -> Settings:
    return Settings(
        app_name="pokemon-investigation",
        log_level="INFO",
        api_base_url="https://pokeapi.test/api/v2/pokemon",
        output_dir=str(tmp_path / "outputs"),
        http_timeout_seconds=5,
        retry_base_delay_seconds=0,
    )
