from dataclasses import asdict
from datetime import datetime
from enum import Enum
import json
from pathlib import Path

from pokemon_investigation.schemas import InputFile, RunOutput


def load_input_names(input_path: Path) -> list[str]:
    if not input_path.exists():
        raise FileNotFoundError(f"input file not found: {input_path}")

    with input_path.open("r", encoding="utf-8") as infile:
        return InputFile.model_validate(json.load(infile)).names


def _jsonable(value: object) -> object:
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def output_to_payload(output: RunOutput) -> dict[str, object]:
    return {
        "report": _jsonable(asdict(output.report)),
        "passports": [_jsonable(asdict(passport)) for passport in output.passports],
        "failures": [_jsonable(asdict(failure)) for failure in output.failures],
    }


def write_json(path: Path, payload: dict[str, object]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as outfile:
        json.dump(payload, outfile, indent=2, sort_keys=True)
        outfile.write("\n")
