"""Process settings read from the environment (and an optional .env file)."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).parent.parent

DEFAULT_LLM_URL = "http://127.0.0.1:1234/v1"


@dataclass(frozen=True)
class Settings:
    data_dir: Path = ROOT / "data"
    presets_dir: Path = ROOT / "presets"
    debug_dir: Path | None = None  # defaults to <data_dir>/debug
    llm_api_url: str = DEFAULT_LLM_URL
    llm_api_key: str = ""
    llm_model: str = ""
    llm_provider_format: str = "openai"
    llm_timeout: float = 120.0
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3001

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv(ROOT / ".env")
        debug = os.getenv("DEBUG_DIR")
        return cls(
            data_dir=Path(os.getenv("DATA_DIR", str(ROOT / "data"))),
            presets_dir=Path(os.getenv("PRESETS_DIR", str(ROOT / "presets"))),
            debug_dir=Path(debug) if debug else None,
            llm_api_url=os.getenv("LLM_API_URL", DEFAULT_LLM_URL),
            llm_api_key=os.getenv("LLM_API_KEY", ""),
            llm_model=os.getenv("LLM_MODEL", ""),
            llm_provider_format=os.getenv("LLM_PROVIDER_FORMAT", "openai"),
            llm_timeout=float(os.getenv("LLM_TIMEOUT", "120")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "3001")),
        )
