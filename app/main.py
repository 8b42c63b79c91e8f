from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from typing import Any, Dict, Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.rate_limit import RateLimiter, client_address, run_sweeper
from config.settings import Settings, get_settings
from dialogue.backend import ReplyBackend, build_backend
from dialogue.core.script import SCRIPT_VERSION
from dialogue.models import ChatRequest, ChatResponse


logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s - %(message)s")
logger = logging.getLogger("between")

CHAT_PATH = "/api/chat"
STATUS_PATH = "/api/status"
MODE_HEADER = "X-AI-Mode"

EMPTY_TRANSCRIPT_MESSAGE = "يجب إرسال مصفوفة رسائل غير فارغة."
INVALID_MESSAGE_MESSAGE = "تنسيق الرسائل غير صحيح. يجب أن تحتوي كل رسالة على 'role' و 'content'."
INVALID_REQUEST_MESSAGE = "تنسيق الطلب غير صحيح."
RATE_LIMITED_MESSAGE = "كثرة الطلبات. انتظر قليلاً ثم حاول مرة أخرى."
UNEXPECTED_ERROR_MESSAGE = "حدث خطأ غير متوقع."


def _validation_message(exc: RequestValidationError) -> str:
    for error in exc.errors():
        loc = tuple(error.get("loc") or ())
        if loc[:2] != ("body", "messages"):
            continue
        if len(loc) == 2:
            return EMPTY_TRANSCRIPT_MESSAGE
        return INVALID_MESSAGE_MESSAGE
    return INVALID_REQUEST_MESSAGE


def create_app(
    settings: Optional[Settings] = None,
    backend: Optional[ReplyBackend] = None,
    limiter: Optional[RateLimiter] = None,
) -> FastAPI:
    settings = settings or get_settings()
    backend = backend or build_backend(settings)
    limiter = limiter or RateLimiter(
        limit=settings.rate_limit_max,
        window_seconds=settings.rate_limit_window,
    )

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        if settings.live_enabled:
            logger.info("AI mode: live (model=%s)", settings.openai_model)
        else:
            logger.info("AI mode: scripted (no OPENAI_API_KEY found)")
        sweeper = asyncio.create_task(run_sweeper(limiter, limiter.window_seconds))
        try:
            yield
        finally:
            sweeper.cancel()
            with suppress(asyncio.CancelledError):
                await sweeper

    app = FastAPI(title="Between Me and You", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.backend = backend
    app.state.limiter = limiter

    # CORS: allow local frontend during development
    if settings.app_env.lower() in {"dev", "development", "local"}:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
        return JSONResponse(status_code=400, content={"detail": _validation_message(exc)})

    @app.post(CHAT_PATH, response_model=ChatResponse)
    async def chat(body: ChatRequest, request: Request, response: Response) -> ChatResponse:
        address = client_address(request, trust_forwarded=settings.trust_forwarded)
        decision = limiter.hit(address)
        if not decision.allowed:
            logger.warning("Rate limit exceeded for %s", address)
            raise HTTPException(
                status_code=429,
                detail=RATE_LIMITED_MESSAGE,
                headers={"Retry-After": str(decision.retry_after)},
            )

        try:
            logger.info(
                "Incoming chat: turns=%s user_turns=%s backend=%s",
                len(body.messages),
                sum(1 for m in body.messages if m.role == "user"),
                backend.name,
            )
            reply = await backend.reply(body.messages)
        except Exception as e:
            logger.exception("Chat processing failed: %s", e)
            raise HTTPException(status_code=500, detail=UNEXPECTED_ERROR_MESSAGE)

        logger.info("Replied via %s: %s chars", reply.mode.value, len(reply.text))
        if not settings.is_production:
            response.headers[MODE_HEADER] = reply.mode.value
        return ChatResponse(reply=reply.text)

    @app.get(STATUS_PATH)
    def status() -> Dict[str, Any]:
        live = settings.live_enabled
        return {
            "mode": "live" if live else "scripted",
            "model": settings.openai_model if live else None,
            "api_key_configured": live,
            "api_key_length": len(settings.openai_api_key) if live else 0,
            "api_key_preview": settings.api_key_preview(),
            "script_version": SCRIPT_VERSION,
        }

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


def run() -> None:
    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


app = create_app()


if __name__ == "__main__":
    run()
