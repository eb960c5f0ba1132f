import asyncio
import logging
from typing import Any, Dict, Optional

import requests

from ..exceptions import (
    ConfigurationError,
    ModelTimeoutError,
    ProtocolError,
    RateLimitError,
    TransportError,
)
from ..interfaces import LLMProvider
from ..interviewer.config import PipelineConfig
from ..interviewer.prompt_generator import QUESTION_SYSTEM_PROMPT
from .rate_limiter import RateLimiter, get_rate_limiter

logger = logging.getLogger(__name__)

CHAT_COMPLETIONS_PATH = "/openai/v1/chat/completions"


class GroqLLM(LLMProvider):
    """Groq chat-completions client used by the question and scoring pipeline.

    Reads its settings from `PipelineConfig` (GROQ_API_KEY, GROQ_API_URL,
    GROQ_MODEL, GROQ_TEMP, GROQ_MAX_TOKENS, GROQ_TOP_P, GROQ_TIMEOUT_S).

    One POST per `complete()` call, no retries: every failure is raised as a
    pipeline error and left to the caller. Requests are spaced by the shared
    `RateLimiter` unless another one is injected.
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        rate_limiter: Optional[RateLimiter] = None,
        session: Optional[requests.Session] = None,
    ):
        self.config = config or PipelineConfig.from_env()
        self.rate_limiter = rate_limiter or get_rate_limiter(self.config.min_request_interval_s)
        self.url = self.config.api_url.rstrip('/') + CHAT_COMPLETIONS_PATH

        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        if self.config.api_key:
            self.session.headers.update({"Authorization": f"Bearer {self.config.api_key}"})

    def _build_payload(self, prompt: str, system_prompt: str) -> Dict[str, Any]:
        return {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
            "top_p": self.config.top_p,
            "stream": False,
        }

    async def complete(self, prompt: str, system_prompt: str = QUESTION_SYSTEM_PROMPT) -> str:
        if not self.config.api_key:
            raise ConfigurationError("GROQ_API_KEY is not configured")

        await self.rate_limiter.await_slot()

        payload = self._build_payload(prompt, system_prompt)
        logger.debug(f"Groq POST {self.url} model={self.config.model} prompt_chars={len(prompt)}")
        try:
            # Blocking call runs in a worker thread so the event loop stays free
            r = await asyncio.to_thread(
                self.session.post,
                self.url,
                json=payload,
                timeout=self.config.timeout_s,
            )
        except requests.Timeout as e:
            logger.error(f"❌ Groq request timed out after {self.config.timeout_s}s")
            raise ModelTimeoutError(f"Groq request timed out after {self.config.timeout_s}s") from e
        except requests.RequestException as e:
            logger.error(f"❌ Groq request failed: {e}")
            raise TransportError(f"Groq request failed: {e}") from e

        if r.status_code == 429:
            logger.warning(f"⚠️ Groq rate limit hit: {r.text[:200]}")
            raise RateLimitError("Rate limit exceeded", status_code=429)
        if not r.ok:
            logger.error(f"❌ Groq returned {r.status_code} {r.reason}: {r.text[:500]}")
            raise TransportError(f"API request failed: {r.status_code} {r.reason}", status_code=r.status_code)

        try:
            data = r.json()
        except ValueError as e:
            raise ProtocolError(f"Response body is not JSON: {r.text[:200]}", status_code=r.status_code) from e

        text = self._extract_text_from_response(data)
        logger.info(f"🧠 Groq completion received ({len(text)} chars)")
        return text

    def _extract_text_from_response(self, data: Any) -> str:
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            logger.error(f"Invalid Groq response structure: {str(data)[:500]}")
            raise ProtocolError("Invalid response structure from Groq API") from e
        if not isinstance(content, str):
            raise ProtocolError("Groq completion content is not a string")
        return content
