"""HTTP API for the chat widget.

Thin delegation to the AnswerQuestion use case: parse the body, attach a
request deadline, map domain errors to status codes.
"""

from typing import Any

try:
    from fastapi import Depends, FastAPI, Request
    from fastapi.exceptions import RequestValidationError
    from fastapi.responses import JSONResponse
    from pydantic import BaseModel
except ImportError as err:
    raise ImportError("FastAPI not installed. Install with: pip install groundchat") from err

from groundchat.application.dto.chat_dto import ChatRequest
from groundchat.application.ports.clock_port import ClockPort
from groundchat.application.use_cases.answer_question import AnswerQuestion
from groundchat.config.composition import build_answer_use_case, build_clock, build_deadline
from groundchat.config.logging_config import setup_logging
from groundchat.config.settings import AppSettings
from groundchat.domain.errors import DeadlineExceeded, DomainError, ValidationError


class ChatRequestModel(BaseModel):
    """Request model for /api/chat.

    Fields are loose so one bad value never rejects the request: malformed
    turns are skipped, a non-string question counts as missing, and a bad
    `top_k` falls back to the default.
    """

    question: Any = None
    message: Any = None
    messages: list[Any] | None = None
    top_k: Any = None


class ReferenceModel(BaseModel):
    source: str
    score: float


class ChatResponseModel(BaseModel):
    """Response model for /api/chat."""

    answer: str
    references: list[ReferenceModel]
    meta: dict[str, Any]


class ErrorResponseModel(BaseModel):
    error: str


app = FastAPI(title="groundchat RAG API", version="0.1.0")

# Built once per process on first use
_settings: AppSettings | None = None
_use_case: AnswerQuestion | None = None


def get_settings() -> AppSettings:
    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings


def get_answer_use_case(settings: AppSettings = Depends(get_settings)) -> AnswerQuestion:
    global _use_case
    if _use_case is None:
        setup_logging(settings.log_level)
        _use_case = build_answer_use_case(settings)
    return _use_case


def get_clock() -> ClockPort:
    return build_clock()


def error_status(err: DomainError) -> int:
    if isinstance(err, ValidationError):
        return 400
    if isinstance(err, DeadlineExceeded):
        return 504
    return 500


def error_body(err: BaseException) -> dict[str, str]:
    return {"error": f"{type(err).__name__}: {err}"}


def validation_detail(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "invalid request body"
    first = errors[0]
    loc = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    msg = first.get("msg", "invalid value")
    return f"{loc}: {msg}" if loc else msg


def _text(value: Any) -> str | None:
    return value if isinstance(value, str) else None


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    # Also covers ConfigurationError raised while building the use case
    return JSONResponse(status_code=error_status(exc), content=error_body(exc))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=400, content={"error": f"ValidationError: {validation_detail(exc)}"}
    )


@app.post(
    "/api/chat",
    response_model=ChatResponseModel,
    responses={400: {"model": ErrorResponseModel}, 500: {"model": ErrorResponseModel}},
)
def chat(
    req: ChatRequestModel,
    use_case: AnswerQuestion = Depends(get_answer_use_case),
    settings: AppSettings = Depends(get_settings),
    clock: ClockPort = Depends(get_clock),
) -> Any:
    """Answer the latest user turn grounded in retrieved passages.

    Example:
        POST /api/chat
        {
            "message": "Which of these are listed?",
            "top_k": 8,
            "messages": [
                {"role": "user", "content": "Which companies use X?"},
                {"role": "assistant", "content": "A and B."},
                {"role": "user", "content": "Which of these are listed?"}
            ]
        }
    """
    dto = ChatRequest(
        question=_text(req.question),
        message=_text(req.message),
        messages=req.messages or [],
        top_k=req.top_k,
    )
    try:
        result = use_case.execute(dto, deadline=build_deadline(settings, clock))
    except Exception as ex:  # noqa: BLE001
        return JSONResponse(status_code=500, content=error_body(ex))

    if not result.ok or result.value is None:
        err = result.error or DomainError("unknown failure")
        return JSONResponse(status_code=error_status(err), content=error_body(err))
    return result.value.to_dict()


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy", "service": "groundchat"}
