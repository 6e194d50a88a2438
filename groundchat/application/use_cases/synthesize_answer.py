# groundchat/application/use_cases/synthesize_answer.py
from __future__ import annotations

from collections.abc import Sequence

from groundchat.application.deadline import Deadline, remaining_or_none
from groundchat.application.ports.llm_port import LLMPort
from groundchat.domain.errors import SynthesisFailure
from groundchat.domain.models import AnswerResult, AssembledPrompt, EvidenceRecord, Reference


class SynthesizeAnswer:
    """Runs the chat model on an assembled prompt and shapes a citable answer."""

    def __init__(
        self,
        llm: LLMPort,
        model: str,
        temperature: float = 0.2,
        max_tokens: int | None = None,
    ) -> None:
        self.llm = llm
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    def execute(
        self,
        prompt: AssembledPrompt,
        evidence: Sequence[EvidenceRecord],
        *,
        top_k: int,
        backend: str,
        threshold: float,
        used_history: int,
        deadline: Deadline | None = None,
    ) -> AnswerResult:
        if deadline is not None:
            deadline.check("synthesis")
        try:
            response = self.llm.chat(
                list(prompt.messages),
                model=self.model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                timeout=remaining_or_none(deadline),
            )
        except Exception as ex:
            if deadline is not None:
                deadline.check("synthesis")
            if isinstance(ex, SynthesisFailure):
                raise
            raise SynthesisFailure(f"{type(ex).__name__}: {ex}") from ex
        if deadline is not None:
            deadline.check("synthesis")

        # A model that returns no content is forwarded as an empty answer.
        answer = getattr(response, "text", None) or ""

        references = [Reference(source=r.source, score=float(r.relevance)) for r in evidence]
        meta = {
            "top_k": top_k,
            "rpc": backend,
            "hits": len(evidence),
            "threshold": threshold,
            "used_history": used_history,
            "model": self.model,
        }
        return AnswerResult(answer=answer, references=references, meta=meta)
