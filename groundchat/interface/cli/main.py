"""CLI for groundchat: one-shot questions and an interactive chat loop."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Callable
from pathlib import Path

from groundchat.application.dto.chat_dto import ChatRequest
from groundchat.application.use_cases.answer_question import AnswerQuestion
from groundchat.config.composition import build_answer_use_case, build_clock, build_deadline
from groundchat.config.logging_config import setup_logging
from groundchat.config.settings import AppSettings
from groundchat.domain.errors import DomainError
from groundchat.domain.models import AnswerResult
from groundchat.interface.cli.transcript import TranscriptStore

CHAT_TOP_K = 8
DEFAULT_TRANSCRIPT = Path.home() / ".groundchat" / "transcript.json"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="groundchat")
    sub = parser.add_subparsers(dest="command", required=True)

    ask = sub.add_parser("ask", help="Answer a single question")
    ask.add_argument("question")
    ask.add_argument("--k", type=int, default=None, help="Passages to retrieve (1-60)")
    ask.add_argument("--timeout", type=float, default=None, help="Request deadline in seconds")
    ask.add_argument("--json", action="store_true", help="Print the raw response object")

    chat = sub.add_parser("chat", help="Interactive conversation with a saved transcript")
    chat.add_argument("--transcript", type=Path, default=DEFAULT_TRANSCRIPT)
    chat.add_argument("--k", type=int, default=CHAT_TOP_K)
    chat.add_argument("--timeout", type=float, default=None)
    return parser


def format_error(err: BaseException) -> str:
    return f"{type(err).__name__}: {err}"


def print_answer(answer: AnswerResult) -> None:
    print("\n" + "=" * 80)
    print("ANSWER:")
    print("=" * 80)
    print(answer.answer or "(no answer)")
    print("\n" + "=" * 80)
    print("CITATIONS:")
    print("=" * 80)
    for i, ref in enumerate(answer.references, 1):
        print(f"[{i}] {ref.source} (score={ref.score:.3f})")


def run_ask(args: argparse.Namespace, uc: AnswerQuestion, settings: AppSettings) -> int:
    req = ChatRequest(question=args.question, top_k=args.k)
    result = uc.execute(req, deadline=build_deadline(settings, build_clock(), args.timeout))

    if result.ok and result.value is not None:
        if args.json:
            print(json.dumps(result.value.to_dict(), ensure_ascii=False, indent=2))
        else:
            print_answer(result.value)
        return 0

    err = result.error or DomainError("unknown failure")
    if args.json:
        print(json.dumps({"error": format_error(err)}, ensure_ascii=False))
    else:
        print(f"\n[ERROR] {format_error(err)}")
    return 1


def run_chat(
    args: argparse.Namespace,
    uc: AnswerQuestion,
    settings: AppSettings,
    read: Callable[[str], str] | None = None,
) -> int:
    read = read or input
    store = TranscriptStore.load(args.transcript)
    print("groundchat: /clear resets the conversation, /exit quits.")
    for turn in store.turns[-4:]:
        print(f"{turn.role}> {turn.content}")

    while True:
        try:
            line = read("you> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return 0
        if not line:
            continue
        if line == "/exit":
            return 0
        if line == "/clear":
            store.clear()
            print("(conversation cleared)")
            continue

        store.append("user", line)
        req = ChatRequest(message=line, messages=store.outbound(), top_k=args.k)
        result = uc.execute(req, deadline=build_deadline(settings, build_clock(), args.timeout))

        if result.ok and result.value is not None:
            reply = result.value.answer or "(no answer)"
        else:
            # Failures stay in the conversation as an assistant message
            reply = f"Error: {format_error(result.error or DomainError('unknown failure'))}"
        store.append("assistant", reply)
        print(f"assistant> {reply}")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = AppSettings()
    setup_logging(settings.log_level)

    try:
        uc = build_answer_use_case(settings)
    except DomainError as err:
        print(f"[ERROR] {format_error(err)}", file=sys.stderr)
        return 2

    if args.command == "ask":
        return run_ask(args, uc, settings)
    return run_chat(args, uc, settings)


if __name__ == "__main__":
    sys.exit(main())
