"""Composition root: the only place that instantiates concrete adapters.

Builders never perform network I/O or load models; clients are created
lazily by the adapters on first use.
"""

from groundchat.application.deadline import Deadline
from groundchat.application.ports.clock_port import ClockPort
from groundchat.application.ports.embedding_port import EmbeddingPort
from groundchat.application.ports.llm_port import LLMPort
from groundchat.application.ports.similarity_search_port import SimilaritySearchPort
from groundchat.application.ports.telemetry_port import TelemetryPort
from groundchat.application.use_cases.answer_question import AnswerOptions, AnswerQuestion
from groundchat.config.settings import AppSettings
from groundchat.domain.errors import ConfigurationError
from groundchat.infrastructure.embeddings.hf_sentence_transformers import HFEmbeddingAdapter
from groundchat.infrastructure.embeddings.openai_embeddings import OpenAIEmbeddingAdapter
from groundchat.infrastructure.llm.openai_chat_adapter import OpenAIChatAdapter
from groundchat.infrastructure.search.qdrant_search import QdrantSearchAdapter
from groundchat.infrastructure.search.supabase_rpc import SupabaseRPCSearchAdapter
from groundchat.infrastructure.telemetry.otel_adapter import OpenTelemetryAdapter, OtelConfig
from groundchat.infrastructure.time.system_clock import SystemClock


def _require(value: str, message: str) -> str:
    if not value:
        raise ConfigurationError(message)
    return value


def build_embedding(settings: AppSettings) -> EmbeddingPort:
    backend = settings.embedding_backend

    if backend == "hf":
        return HFEmbeddingAdapter(
            model_name=settings.hf_embedding_model,
            device=settings.embedding_device,
        )

    if backend == "openai":
        return OpenAIEmbeddingAdapter(
            api_key=_require(settings.openai_api_key, "OPENAI_API_KEY is missing"),
            model=settings.embedding_model,
            base_url=settings.openai_base_url or None,
        )

    raise ConfigurationError(f"unknown EMBEDDING_BACKEND '{backend}' (use 'openai' or 'hf')")


def build_search(settings: AppSettings) -> SimilaritySearchPort:
    backend = settings.search_backend

    if backend == "qdrant":
        return QdrantSearchAdapter(
            url=settings.qdrant_url,
            collection=settings.qdrant_collection,
            api_key=settings.qdrant_api_key or None,
        )

    if backend == "supabase":
        return SupabaseRPCSearchAdapter(
            url=_require(
                settings.supabase_url,
                "SUPABASE_URL is missing (set SUPABASE_URL or NEXT_PUBLIC_SUPABASE_URL)",
            ),
            key=_require(
                settings.supabase_key,
                "SUPABASE key is missing "
                "(set SUPABASE_SERVICE_ROLE_KEY or NEXT_PUBLIC_SUPABASE_ANON_KEY)",
            ),
            rpc_name=settings.match_rpc,
            timeout_s=settings.request_timeout_s,
        )

    raise ConfigurationError(f"unknown SEARCH_BACKEND '{backend}' (use 'supabase' or 'qdrant')")


def build_llm(settings: AppSettings) -> LLMPort:
    return OpenAIChatAdapter(
        api_key=_require(settings.openai_api_key, "OPENAI_API_KEY is missing"),
        model=settings.chat_model,
        base_url=settings.openai_base_url or None,
    )


def build_telemetry(settings: AppSettings) -> TelemetryPort | None:
    """OpenTelemetry metrics when TELEMETRY_ENABLED is set, otherwise none."""
    if not settings.telemetry_enabled:
        return None
    return OpenTelemetryAdapter(
        OtelConfig(
            service_name="groundchat",
            otlp_endpoint=settings.otlp_endpoint or None,
            environment=settings.telemetry_environment,
        )
    )


def build_clock() -> ClockPort:
    return SystemClock()


def build_options(settings: AppSettings) -> AnswerOptions:
    return AnswerOptions(
        model=settings.chat_model,
        temperature=settings.temperature,
        match_threshold=settings.match_threshold,
        default_top_k=settings.default_top_k,
        max_top_k=settings.max_top_k,
        max_history_turns=settings.max_history_turns,
        max_turn_chars=settings.max_turn_chars,
        answer_language=settings.answer_language or None,
    )


def build_deadline(
    settings: AppSettings, clock: ClockPort, timeout_s: float | None = None
) -> Deadline:
    seconds = timeout_s if timeout_s is not None else settings.request_timeout_s
    return Deadline.after(seconds, clock)


def build_answer_use_case(settings: AppSettings | None = None) -> AnswerQuestion:
    """Wire embedding, search and chat adapters into the orchestrator (once per process)."""
    settings = settings or AppSettings()
    return AnswerQuestion(
        embedding=build_embedding(settings),
        search=build_search(settings),
        llm=build_llm(settings),
        options=build_options(settings),
        telemetry=build_telemetry(settings),
    )
