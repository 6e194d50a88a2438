"""Application settings with environment-driven configuration.

This is the ONLY place where environment variables are read. All other
layers receive settings via the composition root.
"""

import os
from dataclasses import dataclass, field


def env(*names: str) -> str | None:
    """First of `names` that is set to a non-blank value, trimmed."""
    for name in names:
        value = os.getenv(name)
        if value and value.strip():
            return value.strip()
    return None


def env_bool(name: str, default: bool) -> bool:
    value = env(name)
    return default if value is None else value.lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class AppSettings:
    """Application settings loaded from environment variables.

    Blank variables count as unset, so an empty `SUPABASE_URL` falls through
    to `NEXT_PUBLIC_SUPABASE_URL` the same way a missing one does.
    """

    # ===== Embedding Configuration =====
    embedding_backend: str = field(
        default_factory=lambda: (env("EMBEDDING_BACKEND") or "openai").lower()
    )
    # Supported: "openai" | "hf"

    openai_api_key: str = field(default_factory=lambda: env("OPENAI_API_KEY") or "")
    openai_base_url: str = field(default_factory=lambda: env("OPENAI_BASE_URL") or "")
    embedding_model: str = field(
        default_factory=lambda: env("OPENAI_EMBEDDING_MODEL") or "text-embedding-3-small"
    )
    hf_embedding_model: str = field(
        default_factory=lambda: env("HF_EMBEDDING_MODEL")
        or "intfloat/multilingual-e5-large-instruct"
    )
    embedding_device: str = field(default_factory=lambda: env("EMBEDDING_DEVICE") or "cpu")

    # ===== Similarity Search Configuration =====
    search_backend: str = field(
        default_factory=lambda: (env("SEARCH_BACKEND") or "supabase").lower()
    )
    # Supported: "supabase" | "qdrant"

    supabase_url: str = field(
        default_factory=lambda: env("SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL") or ""
    )
    # Service role key is preferred (server only); anon keys may be limited by RLS
    supabase_key: str = field(
        default_factory=lambda: env(
            "SUPABASE_SERVICE_ROLE_KEY", "SUPABASE_ANON_KEY", "NEXT_PUBLIC_SUPABASE_ANON_KEY"
        )
        or ""
    )
    match_rpc: str = field(default_factory=lambda: env("SUPABASE_MATCH_RPC") or "match_documents")
    match_threshold: float = field(
        default_factory=lambda: float(env("SUPABASE_MATCH_THRESHOLD") or "0")
    )

    qdrant_url: str = field(default_factory=lambda: env("QDRANT_URL") or "http://localhost:6333")
    qdrant_api_key: str = field(default_factory=lambda: env("QDRANT_API_KEY") or "")
    qdrant_collection: str = field(default_factory=lambda: env("QDRANT_COLLECTION") or "documents")

    # ===== Chat Model Configuration =====
    chat_model: str = field(default_factory=lambda: env("OPENAI_CHAT_MODEL") or "gpt-4.1-mini")
    temperature: float = field(default_factory=lambda: float(env("CHAT_TEMPERATURE") or "0.2"))
    answer_language: str = field(default_factory=lambda: env("ANSWER_LANGUAGE") or "")
    # Empty: answer in the language of the question

    # ===== Pipeline Bounds =====
    default_top_k: int = field(default_factory=lambda: int(env("DEFAULT_TOP_K") or "20"))
    max_top_k: int = field(default_factory=lambda: int(env("MAX_TOP_K") or "60"))
    max_history_turns: int = field(default_factory=lambda: int(env("MAX_HISTORY_TURNS") or "60"))
    max_turn_chars: int = field(default_factory=lambda: int(env("MAX_TURN_CHARS") or "4000"))
    request_timeout_s: float = field(
        default_factory=lambda: float(env("REQUEST_TIMEOUT_S") or "60")
    )

    # ===== Logging & Telemetry =====
    log_level: str = field(default_factory=lambda: (env("LOG_LEVEL") or "INFO").upper())
    telemetry_enabled: bool = field(default_factory=lambda: env_bool("TELEMETRY_ENABLED", False))
    otlp_endpoint: str = field(default_factory=lambda: env("OTLP_ENDPOINT") or "")
    telemetry_environment: str = field(
        default_factory=lambda: env("TELEMETRY_ENVIRONMENT") or "production"
    )
