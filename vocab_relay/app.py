"""FastAPI application: health check plus the two relay endpoints."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

logging.basicConfig(level=logging.INFO, format="%(name)s | %(message)s")

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.datastructures import Headers

from vocab_relay.config import Settings, load_settings
from vocab_relay.errors import RelayError
from vocab_relay.providers.base import LLMProvider
from vocab_relay.relay import generate_question, score_user_answer

log = logging.getLogger("vocab_relay.app")


def make_provider(s: Settings) -> LLMProvider:
    if s.llm_provider == "openai":
        from vocab_relay.providers.llm_openai import OpenAIProvider
        return OpenAIProvider(model=s.llm_model)
    elif s.llm_provider == "anthropic":
        from vocab_relay.providers.llm_anthropic import AnthropicProvider
        return AnthropicProvider(model=s.llm_model)
    elif s.llm_provider == "ollama":
        from vocab_relay.providers.llm_ollama import OllamaProvider
        return OllamaProvider(base_url=s.ollama_url, model=s.llm_model)
    raise ValueError(f"Unknown LLM provider: {s.llm_provider}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.llm = make_provider(settings)
    log.info("Settings: %s", settings.to_dict())
    log.info("Relaying to %s", app.state.llm.name())
    yield
    app.state.llm = None
    log.info("Shutting down")


class PreflightCORSMiddleware(CORSMiddleware):
    """Answer every preflight with 204 and the configured allow-lists.

    Requests for unlisted headers or methods get the same answer; the browser
    enforces the advertised lists.
    """

    def preflight_response(self, request_headers: Headers) -> Response:
        headers = dict(self.preflight_headers)
        origin = request_headers["Origin"]
        if not self.allow_all_origins and self.is_allowed_origin(origin=origin):
            headers["Access-Control-Allow-Origin"] = origin
        return Response(status_code=204, headers=headers)


settings = load_settings()
app = FastAPI(title="Vocab Relay", lifespan=lifespan)

app.add_middleware(
    PreflightCORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization"],
)


def get_llm(request: Request) -> LLMProvider:
    llm = getattr(request.app.state, "llm", None)
    assert llm is not None, "LLM provider not initialized"
    return llm


async def _read_body(request: Request) -> dict:
    body = await request.json()
    if not isinstance(body, dict):
        raise RelayError("request body must be a JSON object")
    return body


def _failure(prefix: str, e: Exception) -> JSONResponse:
    detail = str(e) or type(e).__name__
    log.error("%s: %s", prefix, detail)
    return JSONResponse({"message": f"{prefix}: {detail}"}, status_code=500)


@app.options("/{path:path}")
async def options_any(path: str):
    return Response(status_code=204)


@app.get("/health")
async def health():
    now = datetime.now(timezone.utc)
    return {
        "status": "healthy",
        "timestamp": now.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
    }


@app.post("/generateQuestion")
async def api_generate_question(request: Request, llm: LLMProvider = Depends(get_llm)):
    try:
        body = await _read_body(request)
        seen_words = body.get("seenWords") or []
        if not isinstance(seen_words, list) or not all(isinstance(w, str) for w in seen_words):
            raise RelayError("seenWords must be a list of strings")
        question = await generate_question(llm, body.get("domain"), seen_words)
        return question.to_dict()
    except Exception as e:
        return _failure("Error generating question", e)


@app.post("/scoreUserAnswer")
async def api_score_user_answer(request: Request, llm: LLMProvider = Depends(get_llm)):
    try:
        body = await _read_body(request)
        result = await score_user_answer(
            llm, body.get("domain"), body.get("word"), body.get("userAnswer"),
        )
        return result.to_dict()
    except Exception as e:
        return _failure("Error scoring user answer", e)
