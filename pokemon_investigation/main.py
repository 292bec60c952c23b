import argparse
import asyncio
import logging
from pathlib import Path

from pokemon_investigation.artifacts import load_input_names, output_to_payload, write_json
from pokemon_investigation.config import Settings, get_settings
from pokemon_investigation.runner import InvestigationRunner
from pokemon_investigation.schemas import RunConfig, RunOutput
from pokemon_investigation.source import PokeApiSource


logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Investigate pokemon against the matching criteria")
    parser.add_argument("--input", required=True, help='JSON file shaped like {"names": ["pikachu", ...]}')
    parser.add_argument("--output", required=False, help="Where to write the run output JSON")
    parser.add_argument("--concurrency", type=int, help="Names processed per batch (1-50, default 5)")
    parser.add_argument("--timeout-ms", type=int, help="Per-request timeout (1000-120000, default 30000)")
    parser.add_argument("--retries", type=int, help="Retries after the first attempt (default 2)")
    parser.add_argument("--min-matches", type=int, help="Stop dispatching batches at this many matches (default 10)")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> RunConfig:
    names = load_input_names(Path(args.input))
    options = {
        "concurrency": args.concurrency,
        "timeout_ms": args.timeout_ms,
        "retries": args.retries,
        "min_matches": args.min_matches,
    }
    return RunConfig(names=names, **{key: value for key, value in options.items() if value is not None})


async def investigate(settings: Settings, config: RunConfig) -> RunOutput:
    async with PokeApiSource.from_settings(settings) as source:
        runner = InvestigationRunner(source, base_delay_seconds=settings.retry_base_delay_seconds)
        return await runner.run(config)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    try:
        config = build_config(args)
    except (OSError, ValueError) as exc:
        logger.error("invalid run input", extra={"input": args.input})
        print(f"error={exc}")
        raise SystemExit(1) from exc

    output = asyncio.run(investigate(settings, config))

    report = output.report
    output_path = Path(args.output) if args.output else Path(settings.output_dir) / "runs" / f"{report.run_id}.json"
    write_json(output_path, output_to_payload(output))

    print(
        "run_id={run_id} processed={processed} matched={matched} failed={failed} duration_ms={duration} output={output}".format(
            run_id=report.run_id,
            processed=report.processed,
            matched=report.matched,
            failed=report.failed,
            duration=report.duration_ms,
            output=output_path,
        )
    )


if __name__ == "__main__":
    main()
