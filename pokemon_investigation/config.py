from dataclasses import dataclass
import os

from dotenv import load_dotenv


load_dotenv()


@dataclass(frozen=True)
class Settings:
    app_name: str
    log_level: str
    api_base_url: str
    output_dir: str
    http_timeout_seconds: float
    retry_base_delay_seconds: float


def get_settings() -> Settings:
    return Settings(
        app_name=os.getenv("APP_NAME", "pokemon-investigation"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        api_base_url=os.getenv("POKEAPI_BASE_URL", "https://pokeapi.co/api/v2/pokemon"),
        output_dir=os.getenv("OUTPUT_DIR", "./outputs"),
        http_timeout_seconds=float(os.getenv("HTTP_TIMEOUT_SECONDS", "30")),
        retry_base_delay_seconds=float(os.getenv("RETRY_BASE_DELAY_SECONDS", "1")),
    )
