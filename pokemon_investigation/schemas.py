from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr


NonEmptyName = Annotated[str, Field(min_length=1)]


@dataclass(frozen=True)
class PokemonRecord:
    id: int
    name: str
    base_experience: int
    height: int
    types: tuple[str, ...]
    moves: tuple[str, ...]


class MatchFailureReason(str, Enum):
    NO_MATCHING_TYPE = "NO_MATCHING_TYPE"
    NO_MATCHING_MOVE = "NO_MATCHING_MOVE"


@dataclass(frozen=True)
class Matched:
    matched_types: tuple[str, ...]
    matched_moves: tuple[str, ...]


@dataclass(frozen=True)
class NotMatched:
    reason: MatchFailureReason


MatchOutcome = Matched | NotMatched


@dataclass(frozen=True)
class Passport:
    run_id: str
    id: int
    name: str
    base_experience: int
    height: int
    types: tuple[str, ...]
    moves: tuple[str, ...]
    fetched_at: datetime

    @classmethod
    def from_record(cls, record: PokemonRecord, *, run_id: str, fetched_at: datetime) -> Passport:
        return cls(
            run_id=run_id,
            id=record.id,
            name=record.name,
            base_experience=record.base_experience,
            height=record.height,
            types=record.types,
            moves=record.moves,
            fetched_at=fetched_at,
        )


@dataclass(frozen=True)
class ErrorDetail:
    kind: str
    message: str
    cause: ErrorDetail | None = None

    @classmethod
    def from_exception(cls, exc: BaseException) -> ErrorDetail:
        cause = exc.__cause__
        return cls(
            kind=type(exc).__name__,
            message=str(exc),
            cause=cls.from_exception(cause) if cause is not None else None,
        )


@dataclass(frozen=True)
class ItemSuccess:
    name: str
    passport: Passport
    attempts: int


@dataclass(frozen=True)
class ItemFailure:
    name: str
    error: ErrorDetail
    attempts: int


ItemResult = ItemSuccess | ItemFailure


@dataclass(frozen=True)
class FailureDescriptor:
    name: str
    attempts: int
    message: str
    cause: ErrorDetail | None = None


@dataclass(frozen=True)
class RunReport:
    run_id: str
    processed: int
    matched: int
    failed: int
    duration_ms: int


@dataclass(frozen=True)
class RunOutput:
    report: RunReport
    passports: list[Passport]
    failures: list[FailureDescriptor]


class RunConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    names: tuple[NonEmptyName, ...]
    concurrency: int = Field(default=5, ge=1, le=50)
    timeout_ms: int = Field(default=30000, ge=1000, le=120000)
    retries: int = Field(default=2, ge=0)
    min_matches: int = Field(default=10, ge=1)

    @property
    def max_attempts(self) -> int:
        return self.retries + 1


class InputFile(BaseModel):
    names: list[NonEmptyName] = Field(min_length=1)


class _NamedResource(BaseModel):
    name: StrictStr


class _TypeSlot(BaseModel):
    type: _NamedResource


class _MoveSlot(BaseModel):
    move: _NamedResource


class PokemonApiResponse(BaseModel):
    id: StrictInt = Field(gt=0)
    name: StrictStr
    base_experience: StrictInt | None = None
    height: StrictInt
    types: list[_TypeSlot]
    moves: list[_MoveSlot]

    def to_record(self) -> PokemonRecord:
        return PokemonRecord(
            id=self.id,
            name=self.name,
            base_experience=self.base_experience or 0,
            height=self.height,
            types=tuple(slot.type.name for slot in self.types),
            moves=tuple(slot.move.name for slot in self.moves),
        )
