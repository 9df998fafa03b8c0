"""Summary: Application configuration for triagedesk.

Importance: Centralizes environment, .env, and config defaults for consistent behavior.
Alternatives: Use a dedicated settings library like Pydantic Settings.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

DEFAULTS: dict[str, str] = {
    "db_path": "triagedesk.db",
    "classifier_provider": "mock",
    "groq_api_key": "",
    "groq_model": "llama-3.3-70b-versatile",
    "groq_base_url": "https://api.groq.com/openai/v1",
    "triage_api_url": "http://localhost:3001",
    "cache_ttl_seconds": "600",
    "classifier_retries": "2",
    "retry_backoff_ms": "300",
    "request_timeout_seconds": "30",
    "bulk_limit": "50",
    "api_host": "127.0.0.1",
    "api_port": "3001",
    "api_key": "",
}


@dataclass(frozen=True)
class AppConfig:
    """Summary: Holds configuration values for classifiers, storage, and the API.

    Importance: Ensures all services derive settings from a single source of truth.
    Alternatives: Store settings in a shared config file and parse at startup.
    """

    db_path: str
    classifier_provider: str
    groq_api_key: str | None
    groq_model: str
    groq_base_url: str
    triage_api_url: str
    cache_ttl_seconds: int
    classifier_retries: int
    retry_backoff_ms: int
    request_timeout_seconds: int
    bulk_limit: int
    api_host: str
    api_port: int
    api_key: str

    @staticmethod
    def from_env() -> "AppConfig":
        """Summary: Build configuration from defaults, .env, and environment.

        Importance: Keeps all variables defined in config defaults while allowing overrides.
        Alternatives: Parse only environment variables without a defaults file.
        """

        defaults = load_defaults(Path("config") / "defaults.json")
        load_dotenv(Path(".env"))
        return AppConfig(
            db_path=os.getenv("TRIAGEDESK_DB_PATH", defaults["db_path"]),
            classifier_provider=os.getenv(
                "TRIAGEDESK_CLASSIFIER_PROVIDER", defaults["classifier_provider"]
            ),
            groq_api_key=os.getenv("GROQ_API_KEY") or defaults["groq_api_key"] or None,
            groq_model=os.getenv("GROQ_MODEL", defaults["groq_model"]),
            groq_base_url=os.getenv("GROQ_BASE_URL", defaults["groq_base_url"]),
            triage_api_url=os.getenv("TRIAGEDESK_TRIAGE_API_URL", defaults["triage_api_url"]),
            cache_ttl_seconds=int(
                os.getenv("TRIAGEDESK_CACHE_TTL_SECONDS", defaults["cache_ttl_seconds"])
            ),
            classifier_retries=int(
                os.getenv("TRIAGEDESK_CLASSIFIER_RETRIES", defaults["classifier_retries"])
            ),
            retry_backoff_ms=int(
                os.getenv("TRIAGEDESK_RETRY_BACKOFF_MS", defaults["retry_backoff_ms"])
            ),
            request_timeout_seconds=int(
                os.getenv(
                    "TRIAGEDESK_REQUEST_TIMEOUT_SECONDS", defaults["request_timeout_seconds"]
                )
            ),
            bulk_limit=int(os.getenv("TRIAGEDESK_BULK_LIMIT", defaults["bulk_limit"])),
            api_host=os.getenv("TRIAGEDESK_API_HOST", defaults["api_host"]),
            api_port=int(os.getenv("TRIAGEDESK_API_PORT", defaults["api_port"])),
            api_key=os.getenv("TRIAGEDESK_API_KEY", defaults["api_key"]),
        )


def load_defaults(path: Path) -> dict[str, str]:
    """Summary: Load configuration defaults, overlaying a JSON file when present.

    Importance: Lets deployments pin defaults in one file without editing code.
    Alternatives: Inline defaults in the AppConfig initializer.
    """

    defaults = dict(DEFAULTS)
    if not path.exists():
        return defaults
    overrides = json.loads(path.read_text(encoding="utf-8"))
    defaults.update({key: str(value) for key, value in overrides.items()})
    return defaults


def load_dotenv(path: Path) -> None:
    """Summary: Load key-value pairs from a .env file into the environment.

    Importance: Keeps secrets out of code while supporting local workflows.
    Alternatives: Use python-dotenv or OS-specific secret stores.
    """

    if not path.exists():
        return
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())
