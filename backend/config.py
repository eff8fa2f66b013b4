import os
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel

QUOTA_ENFORCEMENT_MODES = ("best_effort", "strict")
QUOTA_CHARGE_MODES = ("success", "admission")
IDENTITY_BACKENDS = ("supabase", "google", "none")


class Settings(BaseModel):
    groq_api_key: Optional[str] = None
    ollama_url: str = "http://localhost:11434"
    ollama_models: List[str] = ["llama3", "gemma2"]
    llm_timeout_seconds: float = 30.0

    database_path: str = "users.db"
    free_summary_limit: int = 5
    quota_enforcement: str = "best_effort"
    quota_charge_on: str = "success"

    identity_backend: str = "supabase"
    supabase_url: Optional[str] = None
    supabase_service_role_key: Optional[str] = None
    google_client_id: Optional[str] = None

    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"

    @property
    def strict_quota(self) -> bool:
        return self.quota_enforcement == "strict"


def _split(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _choice(name: str, default: str, allowed) -> str:
    value = os.getenv(name, default).strip().lower()
    if value not in allowed:
        raise ValueError(f"{name} must be one of {', '.join(allowed)} (got {value!r})")
    return value


def load_settings() -> Settings:
    """Build settings from the environment, reading a local .env first."""
    load_dotenv(find_dotenv(usecwd=True))

    return Settings(
        groq_api_key=os.getenv("GROQ_API_KEY"),
        ollama_url=os.getenv("OLLAMA_URL", "http://localhost:11434").rstrip("/"),
        ollama_models=_split(os.getenv("OLLAMA_MODELS", "llama3,gemma2")),
        llm_timeout_seconds=float(os.getenv("LLM_TIMEOUT_SECONDS", "30")),
        database_path=os.getenv("DATABASE_PATH", "users.db"),
        free_summary_limit=int(os.getenv("FREE_SUMMARY_LIMIT", "5")),
        quota_enforcement=_choice("QUOTA_ENFORCEMENT", "best_effort", QUOTA_ENFORCEMENT_MODES),
        quota_charge_on=_choice("QUOTA_CHARGE_ON", "success", QUOTA_CHARGE_MODES),
        identity_backend=_choice("IDENTITY_BACKEND", "supabase", IDENTITY_BACKENDS),
        supabase_url=os.getenv("SUPABASE_URL"),
        supabase_service_role_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY"),
        google_client_id=os.getenv("GOOGLE_CLIENT_ID"),
        cors_origins=_split(os.getenv("CORS_ORIGINS", "*")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
