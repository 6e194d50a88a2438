"""Application ports package."""

from groundchat.application.ports.clock_port import ClockPort
from groundchat.application.ports.embedding_port import EmbeddingPort
from groundchat.application.ports.llm_port import ChatMessage, LLMPort, LLMResponse
from groundchat.application.ports.similarity_search_port import SimilaritySearchPort
from groundchat.application.ports.telemetry_port import TelemetryPort

__all__ = [
    "ClockPort",
    "EmbeddingPort",
    "ChatMessage",
    "LLMPort",
    "LLMResponse",
    "SimilaritySearchPort",
    "TelemetryPort",
]
