# groundchat/application/use_cases/answer_question.py
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

from groundchat.application.deadline import Deadline
from groundchat.application.dto.chat_dto import DEFAULT_TOP_K, MAX_TOP_K, ChatRequest, clamp_top_k
from groundchat.application.ports.embedding_port import EmbeddingPort
from groundchat.application.ports.llm_port import LLMPort
from groundchat.application.ports.similarity_search_port import SimilaritySearchPort
from groundchat.application.ports.telemetry_port import TelemetryPort
from groundchat.application.use_cases.retrieve_evidence import RetrieveEvidence
from groundchat.application.use_cases.synthesize_answer import SynthesizeAnswer
from groundchat.domain.errors import DomainError
from groundchat.domain.models import AnswerResult
from groundchat.domain.services.history import normalize_history
from groundchat.domain.services.prompting import assemble_prompt
from groundchat.domain.services.query_resolution import resolve_query
from groundchat.domain.types import Result

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnswerOptions:
    """
    Tuning knobs for the pipeline.

    - model / temperature: chat model id and a low, fixed sampling temperature
    - match_threshold: minimum similarity passed to the search backend (0 disables)
    - default_top_k / max_top_k: request default and upper clamp for evidence count
    - max_history_turns / max_turn_chars: history bounds for the prompt
    - answer_language: forced answer language (None follows the question)
    """

    model: str = "gpt-4.1-mini"
    temperature: float = 0.2
    match_threshold: float = 0.0
    default_top_k: int = DEFAULT_TOP_K
    max_top_k: int = MAX_TOP_K
    max_history_turns: int = 60
    max_turn_chars: int = 4000
    answer_language: str | None = None


class AnswerQuestion:
    """
    Application use case orchestrating the conversational RAG pipeline.

    resolve query -> embed -> search -> normalize history -> assemble prompt -> synthesize.
    Uses only ports; domain failures come back as Result.failure, and the
    first failure ends the request with no partial answer.
    """

    def __init__(
        self,
        embedding: EmbeddingPort,
        search: SimilaritySearchPort,
        llm: LLMPort,
        options: AnswerOptions | None = None,
        telemetry: TelemetryPort | None = None,
    ) -> None:
        self.options = options or AnswerOptions()
        self.retriever = RetrieveEvidence(
            embedding=embedding, search=search, threshold=self.options.match_threshold
        )
        self.synthesizer = SynthesizeAnswer(
            llm=llm, model=self.options.model, temperature=self.options.temperature
        )
        self.telemetry = telemetry

    def execute(
        self, req: ChatRequest, deadline: Deadline | None = None
    ) -> Result[AnswerResult, DomainError]:
        started = time.perf_counter()
        try:
            answer = self._run(req, deadline)
        except DomainError as err:
            kind = type(err).__name__
            logger.warning("chat request failed: %s: %s", kind, err)
            self._incr("rag.errors.total", {"error_type": kind})
            self._incr("rag.requests.total", {"status": "error"})
            self._observe_latency(started, "error")
            return Result.failure(err)

        self._incr("rag.requests.total", {"status": "success"})
        self._observe("rag.evidence.hits", float(answer.meta["hits"]))
        self._observe_latency(started, "success")
        return Result.success(answer)

    def _run(self, req: ChatRequest, deadline: Deadline | None) -> AnswerResult:
        opts = self.options

        # 1) Resolve the query; EmptyQuery short-circuits before any backend call
        query = resolve_query(req.messages, question=req.question, message=req.message)
        top_k = clamp_top_k(req.top_k, default=opts.default_top_k, k_max=opts.max_top_k)

        # 2) Evidence (fact grounding)
        evidence = self.retriever.execute(query, top_k, deadline)

        # 3) History (intent resolution only)
        history = normalize_history(req.messages, opts.max_history_turns, opts.max_turn_chars)
        logger.info(
            "query resolved (%d chars): top_k=%d hits=%d history=%d backend=%s",
            len(query),
            top_k,
            len(evidence),
            len(history),
            self.retriever.backend_name,
        )

        # 4) Prompt
        prompt = assemble_prompt(query, history, evidence, opts.answer_language)

        # 5) Answer
        return self.synthesizer.execute(
            prompt,
            evidence,
            top_k=top_k,
            backend=self.retriever.backend_name,
            threshold=self.retriever.effective_threshold,
            used_history=len(history),
            deadline=deadline,
        )

    def _incr(self, name: str, tags: dict[str, Any]) -> None:
        if self.telemetry is not None:
            self.telemetry.incr(name, tags)

    def _observe(self, name: str, value: float) -> None:
        if self.telemetry is not None:
            self.telemetry.observe(name, value, {"backend": self.retriever.backend_name})

    def _observe_latency(self, started: float, status: str) -> None:
        if self.telemetry is not None:
            self.telemetry.observe(
                "rag.request.latency_ms",
                (time.perf_counter() - started) * 1000.0,
                {"backend": self.retriever.backend_name, "status": status},
            )
