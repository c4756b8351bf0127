"""Provider client: one bounded HTTP call to one model endpoint.

``ProviderClient.invoke`` never raises. Transport errors, non-2xx
statuses, timeouts and unparsable bodies all come back as a normal
``ProviderResult`` whose text starts with ``ERROR_MARKER`` and whose
token counts are zero. That keeps the fan-out simple: every call
yields exactly one row.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

from promptwatt.config import Settings
from promptwatt.providers.registry import ProviderId, display_name

logger = logging.getLogger(__name__)

ERROR_MARKER = "Error: "


class Timing(str, Enum):
    """How much the latency field of a result can be trusted."""
    MEASURED = "measured"       # Successful call with a positive duration
    UNMEASURED = "unmeasured"   # No timing available (latency 0)
    FAILED = "failed"           # Error result; latency is not comparable


@dataclass(frozen=True)
class ProviderResult:
    """One provider's outcome for one prompt."""
    provider_id: str
    display_name: str
    output_text: str
    input_tokens: int = 0
    output_tokens: int = 0
    latency_ms: int = 0
    failed: bool = False        # Set only by error_result()

    def __post_init__(self):
        if not self.output_text:
            raise ValueError("output_text must not be empty")
        if self.failed and not self.output_text.startswith(ERROR_MARKER):
            raise ValueError(f"failed results must start with {ERROR_MARKER!r}")
        if self.failed and (self.input_tokens or self.output_tokens):
            raise ValueError("failed results carry no token counts")
        if self.input_tokens < 0 or self.output_tokens < 0:
            raise ValueError("token counts must be non-negative")
        if self.latency_ms < 0:
            raise ValueError("latency_ms must be non-negative")

    @property
    def is_error(self) -> bool:
        return self.failed

    @property
    def timing(self) -> Timing:
        if self.is_error:
            return Timing.FAILED
        if self.latency_ms <= 0:
            return Timing.UNMEASURED
        return Timing.MEASURED

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    def to_dict(self) -> dict[str, Any]:
        return {
            "model": self.provider_id,
            "modelName": self.display_name,
            "response": self.output_text,
            "inputTokens": self.input_tokens,
            "outputTokens": self.output_tokens,
            "responseTime": self.latency_ms,
        }


def error_result(provider_id: str, message: str, latency_ms: int = 0) -> ProviderResult:
    """Build an error-marked result for a provider."""
    return ProviderResult(
        provider_id=provider_id,
        display_name=display_name(provider_id),
        output_text=f"{ERROR_MARKER}{message}",
        input_tokens=0,
        output_tokens=0,
        latency_ms=max(0, latency_ms),
        failed=True,
    )


class ProviderCallError(Exception):
    """Internal: a single provider call did not produce usable content."""


def _provider_key(provider_id: str | ProviderId) -> str:
    return provider_id.value if isinstance(provider_id, ProviderId) else str(provider_id)


def _coerce_tokens(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return max(0, int(value))


class ProviderClient:
    """Calls an OpenAI-compatible chat-completions endpoint.

    Usage:
        async with ProviderClient(settings) as client:
            result = await client.invoke(ProviderId.LLAMA_2, "What is 2+2?")
    """

    def __init__(
        self,
        settings: Settings,
        http: httpx.AsyncClient | None = None,
    ):
        self.settings = settings
        self._http = http
        self._owns_http = http is None

    async def _client(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient()
            self._owns_http = True
        return self._http

    async def aclose(self) -> None:
        if self._owns_http and self._http is not None and not self._http.is_closed:
            await self._http.aclose()

    async def __aenter__(self) -> "ProviderClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.settings.api_key or ''}",
            "HTTP-Referer": self.settings.referer,
            "X-Title": self.settings.title,
        }

    async def invoke(
        self,
        provider_id: str | ProviderId,
        prompt: str,
        timeout_ms: int | None = None,
    ) -> ProviderResult:
        """Send ``prompt`` to one provider. Always returns a result."""
        key = _provider_key(provider_id)
        timeout_ms = timeout_ms or self.settings.timeout_ms
        start = time.monotonic()

        def elapsed_ms() -> int:
            return int((time.monotonic() - start) * 1000)

        try:
            logger.info(f"Making request to model: {key}")
            data = await asyncio.wait_for(
                self._post(key, prompt, timeout_ms / 1000),
                timeout=timeout_ms / 1000,
            )
            latency = elapsed_ms()
            return self._parse_success(key, data, latency)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.error(f"Timeout after {timeout_ms}ms for model {key}")
            return error_result(
                key,
                f"Failed to get response from this model. Request timed out after {timeout_ms}ms",
                elapsed_ms(),
            )
        except Exception as e:
            logger.error(f"Error with model {key}: {e}")
            return error_result(
                key,
                f"Failed to get response from this model. {str(e) or type(e).__name__}",
                elapsed_ms(),
            )

    async def _post(self, provider_key: str, prompt: str, timeout_s: float) -> Any:
        client = await self._client()
        resp = await client.post(
            self.settings.api_url,
            headers=self._headers(),
            json={
                "model": provider_key,
                "messages": [{"role": "user", "content": prompt}],
            },
            timeout=httpx.Timeout(timeout_s),
        )

        if not resp.is_success:
            raise ProviderCallError(self._status_message(resp))

        try:
            return resp.json()
        except ValueError as e:
            raise ProviderCallError(f"Failed to parse response: {e}") from e

    @staticmethod
    def _status_message(resp: httpx.Response) -> str:
        detail = resp.reason_phrase
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            err = body.get("error")
            if isinstance(err, dict) and err.get("message"):
                detail = err["message"]
            elif isinstance(err, str) and err:
                detail = err
        return f"API returned {resp.status_code}: {detail}"

    def _parse_success(self, provider_key: str, data: Any, latency_ms: int) -> ProviderResult:
        if not isinstance(data, dict):
            raise ProviderCallError(
                f"Failed to parse response: expected a JSON object, got {type(data).__name__}")

        choices = data.get("choices")
        content = None
        if isinstance(choices, list) and choices:
            first = choices[0]
            if not isinstance(first, dict):
                raise ProviderCallError("Failed to parse response: malformed choices")
            message = first.get("message") or {}
            if isinstance(message, dict):
                content = message.get("content")

        usage = data.get("usage") if isinstance(data.get("usage"), dict) else {}

        return ProviderResult(
            provider_id=provider_key,
            display_name=display_name(provider_key),
            output_text=content if isinstance(content, str) and content else "No response content",
            input_tokens=_coerce_tokens(usage.get("prompt_tokens")),
            output_tokens=_coerce_tokens(usage.get("completion_tokens")),
            latency_ms=latency_ms,
        )
