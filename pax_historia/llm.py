"""LLM client: HTTP connection to a chat-completion backend.

The generation client injects an LLM callable matching the protocol:

    async def __call__(self, stage: str, messages: list[PromptMessage], *,
                       temperature: float = 0.7, max_tokens: int | None = None) -> str: ...

`messages` is an ordered list of role-tagged turns (system / user /
assistant). `stage` identifies which request kind is calling ("turn_events",
"advisor", "diplomacy"); implementations may use it for logging only.

Two implementations are provided:

    HttpLLM  : real HTTP client, supports OpenAI-compatible chat completion
                 (LM Studio, llama.cpp server, vLLM, ...) and KoboldCpp.
    EchoLLM  : returns the last message back unchanged. Useful for
                 smoke-testing the wiring without a running model.

Tests use StubLLM (defined in the test helpers) instead.
"""

from __future__ import annotations

import logging
from typing import Literal, Protocol, TypedDict

import httpx

logger = logging.getLogger(__name__)


class PromptMessage(TypedDict):
    role: Literal["system", "user", "assistant"]
    content: str


# ---------------------------------------------------------------------------
# Protocol: every LLM implementation must match this signature
# ---------------------------------------------------------------------------

class LLM(Protocol):
    async def __call__(
        self,
        stage: str,
        messages: list[PromptMessage],
        *,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> str: ...


# ---------------------------------------------------------------------------
# HttpLLM: connects to a real backend
# ---------------------------------------------------------------------------

ProviderFormat = Literal["openai", "koboldcpp"]


def flatten_messages(messages: list[PromptMessage]) -> str:
    """Render chat turns as one plain-text prompt for completion-only backends."""
    parts = [f"### {m['role'].capitalize()}\n{m['content']}" for m in messages]
    parts.append("### Assistant\n")
    return "\n\n".join(parts)


class HttpLLM:
    """Async HTTP client for chat-completion backends.

    Supported formats:
      "openai"    : POST {base}/chat/completions  {"model", "messages", ...}
                     Response: {"choices": [{"message": {"content": "..."}}]}
                     The base URL gets a trailing /v1 unless it already has
                     one (or an /api/v1 path).
      "koboldcpp" : POST {base}/api/v1/generate  {"prompt": ...}
                     Response: {"results": [{"text": "..."}]}
                     Chat turns are flattened into one prompt.

    Args:
        provider_url:    Base URL of the backend, e.g. "http://127.0.0.1:1234/v1".
        api_key:         Bearer token, or empty string if not required.
        provider_format: Wire format to use. Defaults to "openai".
        model:           Model identifier, used only by the openai format.
        timeout:         HTTP timeout in seconds. Defaults to 120.
    """

    def __init__(
        self,
        provider_url: str,
        api_key: str = "",
        provider_format: ProviderFormat = "openai",
        model: str = "",
        timeout: float = 120.0,
    ) -> None:
        self._base_url = provider_url.rstrip("/")
        self._api_key = api_key
        self._format = provider_format
        self._model = model
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def _openai_base(self) -> str:
        if "/api/v1" in self._base_url or self._base_url.endswith("/v1"):
            return self._base_url
        return f"{self._base_url}/v1"

    def _build_request(
        self, messages: list[PromptMessage], temperature: float, max_tokens: int | None
    ) -> tuple[str, dict]:
        """Return (url, body) for the configured format."""
        if self._format == "koboldcpp":
            url = f"{self._base_url}/api/v1/generate"
            body: dict = {"prompt": flatten_messages(messages), "temperature": temperature}
            if max_tokens:
                body["max_length"] = max_tokens
            return url, body

        # openai (default)
        url = f"{self._openai_base()}/chat/completions"
        body = {"messages": list(messages), "temperature": temperature}
        if self._model:
            body["model"] = self._model
        if max_tokens:
            body["max_tokens"] = max_tokens
        return url, body

    def _parse_response(self, data: dict) -> str:
        """Extract the completion text from the response body."""
        if self._format == "koboldcpp":
            results = data.get("results")
            if not results or "text" not in results[0]:
                raise LLMError("Unexpected response format from KoboldCpp backend")
            return results[0]["text"]

        choices = data.get("choices")
        if not choices:
            raise LLMError("Unexpected response format from OpenAI-compatible backend")
        content = (choices[0].get("message") or {}).get("content")
        if not isinstance(content, str):
            raise LLMError("Unexpected response format from OpenAI-compatible backend")
        return content

    async def __call__(
        self,
        stage: str,
        messages: list[PromptMessage],
        *,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> str:
        url, body = self._build_request(messages, temperature, max_tokens)
        logger.debug("llm call stage=%s url=%s messages=%d", stage, url, len(messages))

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(url, json=body, headers=self._headers())
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise LLMError(f"Cannot connect to LLM backend at {self._base_url}") from e
        except httpx.HTTPStatusError as e:
            raise LLMError(
                f"LLM backend returned HTTP {e.response.status_code}"
            ) from e
        except httpx.TimeoutException as e:
            raise LLMError(f"LLM backend timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise LLMError(f"LLM request failed: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise LLMError("LLM backend returned a non-JSON body") from e
        if not isinstance(data, dict):
            raise LLMError("LLM backend returned a non-object body")
        text = self._parse_response(data)
        logger.debug("llm response stage=%s len=%d", stage, len(text))
        return text


# ---------------------------------------------------------------------------
# EchoLLM: returns the last message unchanged; useful for wiring smoke tests
# ---------------------------------------------------------------------------

class EchoLLM:
    """Returns the content of the last message as-is. No network calls.

    The output won't be valid JSON for turn generation, so turns degrade to
    an empty event list, which is what a wiring test wants to see.
    """

    async def __call__(
        self,
        stage: str,
        messages: list[PromptMessage],
        *,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> str:
        logger.debug("EchoLLM stage=%s messages=%d", stage, len(messages))
        return messages[-1]["content"] if messages else ""


# ---------------------------------------------------------------------------
# LLMError: raised by HttpLLM for all connection and protocol failures
# ---------------------------------------------------------------------------

class LLMError(RuntimeError):
    """Raised when the LLM backend cannot be reached or returns an error."""
