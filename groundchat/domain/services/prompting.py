# groundchat/domain/services/prompting.py
# Pure domain service: builds the message sequence handed to the chat model.
from __future__ import annotations

from collections.abc import Sequence

from groundchat.domain.models import AssembledPrompt, ChatMessage, EvidenceRecord, Turn

NO_CONTEXT_PLACEHOLDER = "(no context)"

GROUNDING_POLICY = (
    "You are an assistant that answers using only the provided context.\n"
    "- Do not guess. If the context does not support an answer, say that it is unknown "
    "and cannot be determined from the material.\n"
    '- Interpret references such as "this", "that", "the one above" or "among these" '
    "by looking at the conversation history.\n"
    "- Facts must always come from the context. The conversation history is only for "
    "understanding what the user means, never a source of facts.\n"
    "- Be as specific as possible. When the context names several matching entities "
    "(for example company names), list all of them explicitly instead of picking one."
)

FINAL_BLOCK_TEMPLATE = "# Context\n{context}\n\n# Question\n{question}\n\n# Answer\n"


def grounding_policy(answer_language: str | None = None) -> str:
    if answer_language:
        return f"{GROUNDING_POLICY}\n- Answer in {answer_language}."
    return f"{GROUNDING_POLICY}\n- Answer in the language of the question."


def render_evidence_digest(evidence: Sequence[EvidenceRecord]) -> str:
    """Render `[#i] source: <source>\\n<text>` entries separated by a blank line."""
    entries = [
        f"[#{i}] source: {record.source}\n{record.text}".strip()
        for i, record in enumerate(evidence, start=1)
    ]
    return "\n\n".join(entries)


def assemble_prompt(
    question: str,
    history: Sequence[Turn],
    evidence: Sequence[EvidenceRecord],
    answer_language: str | None = None,
) -> AssembledPrompt:
    """
    Compose policy, history and the final evidence+question block.

    History blocks sit between the policy and the final block so that the
    evidence and the question are the last, most salient instruction.
    """
    context = render_evidence_digest(evidence) or NO_CONTEXT_PLACEHOLDER
    final = FINAL_BLOCK_TEMPLATE.format(context=context, question=question)
    return AssembledPrompt(
        messages=(
            ChatMessage(role="system", content=grounding_policy(answer_language)),
            *(ChatMessage(role=t.role, content=t.content) for t in history),
            ChatMessage(role="user", content=final),
        )
    )
