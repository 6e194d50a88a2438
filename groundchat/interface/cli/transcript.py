"""Local chat transcript for the interactive CLI.

The pipeline itself is stateless; conversation memory lives here, on the
caller side, the way a chat widget keeps it in browser storage.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from groundchat.domain.models import Turn

MAX_STORE_TURNS = 200  # turns kept on disk
MAX_SEND_TURNS = 60  # turns sent with each request


@dataclass
class TranscriptStore:
    path: Path | None = None
    turns: list[Turn] = field(default_factory=list)

    @classmethod
    def load(cls, path: Path | None) -> TranscriptStore:
        """Read a saved transcript; unreadable or malformed files start empty."""
        store = cls(path=path)
        if path is None or not path.exists():
            return store
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return store
        if not isinstance(raw, list):
            return store
        for item in raw:
            if (
                isinstance(item, dict)
                and item.get("role") in ("user", "assistant")
                and isinstance(item.get("content"), str)
            ):
                store.turns.append(Turn(role=item["role"], content=item["content"]))
        return store

    def append(self, role: str, content: str) -> None:
        self.turns.append(Turn(role=role, content=content))  # type: ignore[arg-type]
        self.save()

    def outbound(self) -> list[Turn]:
        return self.turns[-MAX_SEND_TURNS:]

    def clear(self) -> None:
        self.turns = []
        self.save()

    def save(self) -> None:
        if self.path is None:
            return
        if not self.turns:
            self.path.unlink(missing_ok=True)
            return
        self.turns = self.turns[-MAX_STORE_TURNS:]
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [{"role": t.role, "content": t.content} for t in self.turns]
        self.path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
