import asyncio
from collections.abc import Awaitable, Callable, Mapping, Sequence
from datetime import UTC, datetime
import logging
import time
import uuid

from pokemon_investigation.criteria import evaluate
from pokemon_investigation.errors import CriteriaNotMatchedError, FetchTimeoutError, NonRetryableError, RetryExhaustedError
from pokemon_investigation.retry import with_retry
from pokemon_investigation.schemas import (
    ErrorDetail,
    FailureDescriptor,
    ItemFailure,
    ItemResult,
    ItemSuccess,
    NotMatched,
    Passport,
    PokemonRecord,
    RunConfig,
    RunOutput,
    RunReport,
)
from pokemon_investigation.source import RecordSource


logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


def batched(names: Sequence[str], size: int) -> list[Sequence[str]]:
    return [names[start : start + size] for start in range(0, len(names), size)]


class InvestigationRunner:
    def __init__(
        self,
        source: RecordSource,
        *,
        base_delay_seconds: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.source = source
        self.base_delay_seconds = base_delay_seconds
        self.sleep = sleep

    async def run(self, config: RunConfig | Mapping[str, object]) -> RunOutput:
        if not isinstance(config, RunConfig):
            config = RunConfig.model_validate(config)

        run_id = str(uuid.uuid4())
        started = time.perf_counter()
        logger.info(
            "investigation run started",
            extra={"run_id": run_id, "total_names": len(config.names), "concurrency": config.concurrency},
        )

        results = await self._process_batches(config, run_id)

        passports: list[Passport] = []
        failures: list[FailureDescriptor] = []
        for result in results:
            if isinstance(result, ItemSuccess):
                passports.append(result.passport)
            else:
                failures.append(
                    FailureDescriptor(
                        name=result.name,
                        attempts=result.attempts,
                        message=result.error.message,
                        cause=result.error.cause,
                    )
                )

        report = RunReport(
            run_id=run_id,
            processed=len(results),
            matched=len(passports),
            failed=len(failures),
            duration_ms=round((time.perf_counter() - started) * 1000),
        )
        logger.info(
            "investigation run completed",
            extra={
                "run_id": run_id,
                "processed": report.processed,
                "matched": report.matched,
                "failed": report.failed,
                "duration_ms": report.duration_ms,
            },
        )
        return RunOutput(report=report, passports=passports, failures=failures)

    async def _process_batches(self, config: RunConfig, run_id: str) -> list[ItemResult]:
        results: list[ItemResult] = []
        match_count = 0

        for index, batch in enumerate(batched(config.names, config.concurrency), start=1):
            logger.info("dispatching batch", extra={"run_id": run_id, "batch": index, "batch_size": len(batch)})
            # gather keeps results in launch order regardless of completion order.
            batch_results = await asyncio.gather(*(self._process_one(name, config, run_id) for name in batch))

            results.extend(batch_results)
            match_count += sum(1 for result in batch_results if isinstance(result, ItemSuccess))

            if match_count >= config.min_matches:
                remaining = len(config.names) - len(results)
                if remaining:
                    logger.info(
                        "minimum matches reached, skipping remaining names",
                        extra={"run_id": run_id, "matched": match_count, "skipped": remaining},
                    )
                break

        return results

    async def _process_one(self, name: str, config: RunConfig, run_id: str) -> ItemResult:
        attempts = 0

        def count_failure(attempt: int, exc: Exception) -> None:
            nonlocal attempts
            attempts = attempt

        try:
            record = await with_retry(
                lambda: self._fetch_with_timeout(name, config.timeout_ms / 1000),
                max_attempts=config.max_attempts,
                base_delay=self.base_delay_seconds,
                context=f"pokemon '{name}'",
                on_attempt_failure=count_failure,
                sleep=self.sleep,
            )
            attempts += 1

            outcome = evaluate(record)
            if isinstance(outcome, NotMatched):
                raise CriteriaNotMatchedError(name, outcome.reason.value)

            passport = Passport.from_record(record, run_id=run_id, fetched_at=utc_now())
            return ItemSuccess(name=name, passport=passport, attempts=attempts)
        except Exception as exc:
            if isinstance(exc, (NonRetryableError, RetryExhaustedError)):
                attempts = exc.attempts
            logger.warning("pokemon processing failed", extra={"run_id": run_id, "pokemon": name, "error": str(exc)})
            return ItemFailure(name=name, error=ErrorDetail.from_exception(exc), attempts=attempts)

    async def _fetch_with_timeout(self, name: str, timeout_seconds: float) -> PokemonRecord:
        try:
            async with asyncio.timeout(timeout_seconds):
                return await self.source.fetch(name)
        except TimeoutError as exc:
            raise FetchTimeoutError(f"request timeout for '{name}' after {timeout_seconds:g}s", name=name) from exc
