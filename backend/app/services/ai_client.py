import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Any

import httpx


logger = logging.getLogger(__name__)

# Statuses retried up to max_retries. Timeouts are never retried.
_RETRYABLE_STATUS = {408, 429, 500, 502, 503, 504}


class AIClientError(RuntimeError):
    pass


class AIClientTimeout(AIClientError):
    pass


class AIClientHTTPError(AIClientError):
    def __init__(self, *, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class CompletionMeta:
    model: str
    latency_ms: int
    status_code: int | None
    retries: int


def _safe_truncate(s: str, n: int = 800) -> str:
    s = s or ""
    if len(s) <= n:
        return s
    return s[:n] + "…"


def _extract_text(data: dict[str, Any]) -> str:
    # Typical shape:
    # { candidates: [ { content: { parts: [ { text: "..." } ] } } ], ... }
    parts = ((data.get("candidates") or [{}])[0].get("content") or {}).get("parts") or [{}]
    return "".join(str(p.get("text") or "") for p in parts if isinstance(p, dict)).strip()


class CompletionClient:
    """
    Gemini Generative Language API client (API key auth).

    Endpoint:
      POST {base_url}/{api_version}/models/{model}:generateContent
    Auth:
      x-goog-api-key: {api_key}

    One instance is built at startup and shared; it holds configuration only,
    each call opens its own httpx.AsyncClient.
    """

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        base_url: str = "https://generativelanguage.googleapis.com",
        api_version: str = "v1",
        timeout_s: float = 5.0,
        max_retries: int = 0,
        log_payloads: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not api_key:
            raise AIClientError("Missing GEMINI_API_KEY")
        if not model:
            raise AIClientError("Missing GEMINI_MODEL")
        self.api_key = api_key
        self.model = model[len("models/"):] if model.startswith("models/") else model
        self.base_url = (base_url or "").rstrip("/")
        self.api_version = (api_version or "v1").strip().lstrip("/")
        self.timeout_s = timeout_s
        self.max_retries = max_retries
        self.log_payloads = log_payloads
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{self.base_url}/{self.api_version}/models/{self.model}:generateContent"

    def _build_body(self, user_text: str, system_text: str | None, temperature: float, max_output_tokens: int) -> dict[str, Any]:
        # Some v1 deployments reject systemInstruction, so the system prompt is inlined.
        effective_user = user_text or ""
        if system_text:
            effective_user = f"{system_text.strip()}\n\n{effective_user}"
        return {
            "contents": [
                {"role": "user", "parts": [{"text": effective_user}]},
            ],
            "generationConfig": {
                "temperature": float(temperature),
                "maxOutputTokens": int(max_output_tokens),
            },
        }

    async def complete(
        self,
        *,
        user_text: str,
        system_text: str | None = None,
        temperature: float = 0.7,
        max_output_tokens: int = 500,
        timeout_s: float | None = None,
    ) -> tuple[str, CompletionMeta]:
        """Returns (model_text, meta). Raises AIClientError subclasses on failure."""
        body = self._build_body(user_text, system_text, temperature, max_output_tokens)
        headers = {
            "x-goog-api-key": self.api_key,
            "content-type": "application/json",
        }
        timeout = self.timeout_s if timeout_s is None else timeout_s
        start = time.perf_counter()

        for attempt in range(self.max_retries + 1):
            try:
                async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                    if self.log_payloads:
                        logger.info(
                            "Gemini request model=%s body=%s",
                            self.model,
                            _safe_truncate(json.dumps(body, ensure_ascii=False)),
                        )
                    r = await client.post(self.url, json=body, headers=headers)

                if r.status_code >= 400:
                    if r.status_code in _RETRYABLE_STATUS and attempt < self.max_retries:
                        backoff = 0.5 * (2**attempt)
                        logger.warning("Gemini HTTP %s; retrying in %.1fs", r.status_code, backoff)
                        await asyncio.sleep(backoff)
                        continue
                    raise AIClientHTTPError(status_code=r.status_code, message=_safe_truncate(r.text, 1000))

                try:
                    text = _extract_text(r.json() or {})
                except (ValueError, AttributeError, IndexError) as e:
                    raise AIClientError(f"Unexpected Gemini response: {type(e).__name__}") from e
                if not text:
                    raise AIClientError("Empty Gemini response")

                meta = CompletionMeta(
                    model=self.model,
                    latency_ms=int((time.perf_counter() - start) * 1000),
                    status_code=r.status_code,
                    retries=attempt,
                )
                logger.info(
                    "Gemini ok model=%s status=%s latency_ms=%s retries=%s",
                    meta.model,
                    meta.status_code,
                    meta.latency_ms,
                    meta.retries,
                )
                return text, meta
            except httpx.TimeoutException:
                logger.warning("Gemini timeout after %.1fs", timeout)
                raise AIClientTimeout("Gemini request timed out") from None
            except httpx.RequestError as e:
                if attempt < self.max_retries:
                    backoff = 0.5 * (2**attempt)
                    logger.warning("Gemini network error (%s); retrying in %.1fs", type(e).__name__, backoff)
                    await asyncio.sleep(backoff)
                    continue
                raise AIClientError(f"Gemini request failed: {type(e).__name__}") from e

        # Loop always returns or raises.
        raise AIClientError("Gemini request failed")
