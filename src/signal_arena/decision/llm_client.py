"""OpenAI-compatible chat client used by the reasoning oracle."""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
import time
from typing import Any, Dict, Optional, Tuple, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from signal_arena.config import Settings, settings

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

RETRYABLE_ERRORS = (httpx.HTTPError, ValidationError, json.JSONDecodeError)


@dataclass(frozen=True)
class ProviderConfig:
    name: str
    api_key: str
    api_base: str
    model: str

    @property
    def completions_url(self) -> str:
        return self.api_base.rstrip("/") + "/chat/completions"


def provider_defaults(provider: str, cfg: Settings) -> ProviderConfig:
    """Endpoint, key and model for a provider; generic ``LLM_*`` settings win."""
    if cfg.llm_api_base or cfg.llm_api_key or cfg.llm_model:
        return ProviderConfig(provider, cfg.llm_api_key, cfg.llm_api_base, cfg.llm_model)
    if provider == "deepseek":
        return ProviderConfig(
            "deepseek", cfg.deepseek_api_key, cfg.deepseek_api_base, cfg.deepseek_model
        )
    if provider == "ollama":
        return ProviderConfig("ollama", "", cfg.ollama_api_base, cfg.ollama_model)
    return ProviderConfig("openai", cfg.openai_api_key, cfg.openai_api_base, cfg.openai_model)


class LLMClient:
    """Chat-completions client for OpenAI, DeepSeek or a local Ollama server.

    Replies are parsed into a pydantic model. Transport errors and malformed
    or invalid JSON are retried with a linear backoff.
    """

    def __init__(
        self,
        provider: Optional[str] = None,
        api_key: Optional[str] = None,
        api_base: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.provider = (provider or settings.llm_provider or "openai").lower()
        self.timeout = timeout if timeout is not None else settings.llm_timeout_s
        self.max_retries = max(
            1, max_retries if max_retries is not None else settings.llm_max_retries
        )
        self._transport = transport

        defaults = provider_defaults(self.provider, settings)
        self.config = ProviderConfig(
            name=defaults.name,
            api_key=api_key or defaults.api_key,
            api_base=api_base or defaults.api_base,
            model=model or defaults.model,
        )
        if not self.config.api_base:
            raise ValueError(f"LLM API base missing for provider: {self.provider}")
        if not self.config.model:
            raise ValueError(f"LLM model missing for provider: {self.provider}")

    def chat_json(
        self,
        system_prompt: str,
        user_prompt: str,
        response_model: Type[ModelT],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> Tuple[ModelT, str]:
        """Return the parsed reply and the raw text it came from."""
        body = self._request_body(
            system_prompt,
            user_prompt,
            settings.llm_temperature if temperature is None else temperature,
            settings.llm_max_tokens if max_tokens is None else max_tokens,
        )
        attempt = 1
        while True:
            try:
                raw = self._complete(body)
                return response_model.model_validate(parse_json_object(raw)), raw
            except RETRYABLE_ERRORS as exc:
                if attempt >= self.max_retries:
                    raise
                logger.warning(
                    "LLM attempt %s/%s via %s failed: %s",
                    attempt,
                    self.max_retries,
                    self.config.name,
                    exc,
                )
                time.sleep(0.5 * attempt)
                attempt += 1

    def _request_body(
        self, system_prompt: str, user_prompt: str, temperature: float, max_tokens: int
    ) -> Dict[str, Any]:
        return {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
            "response_format": {"type": "json_object"},
        }

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return headers

    def _complete(self, body: Dict[str, Any]) -> str:
        with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
            response = client.post(self.config.completions_url, headers=self._headers(), json=body)
        response.raise_for_status()
        return completion_text(response.json())


def completion_text(data: Dict[str, Any]) -> str:
    """Text of the first choice, from either the chat or the legacy shape."""
    choices = data.get("choices") or [{}]
    first = choices[0]
    content = (first.get("message") or {}).get("content") or first.get("text") or ""
    return content.strip()


def parse_json_object(text: str) -> dict:
    """Decode a JSON object, tolerating markdown fences or prose around it."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        start, end = text.find("{"), text.rfind("}")
        if start < 0 or end <= start:
            raise
        return json.loads(text[start : end + 1])
