"""
Completion clients.

Both clients take a finished prompt and return the model's raw text. Neither
retries: one failed attempt is raised to the caller as a QuizGenerationError.
"""
import asyncio
import logging
from typing import List, Optional, Protocol

import google.generativeai as genai
import requests
from google.api_core import exceptions as google_exceptions

from config import Settings
from errors import EmptyResponse, NetworkError, ProviderError, RequestTimeout

logger = logging.getLogger(__name__)

ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
DEFAULT_MODEL = "claude-sonnet-4-20250514"
MAX_TOKENS = 4000


class CompletionClient(Protocol):
    async def complete(self, prompt: str) -> str:
        """Send one prompt and return the generated text."""


class AnthropicCompletionClient:
    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        max_tokens: int = MAX_TOKENS,
        api_url: str = ANTHROPIC_API_URL,
        timeout: float = 60.0,
    ):
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.api_url = api_url
        self.timeout = timeout

    async def complete(self, prompt: str) -> str:
        return await asyncio.to_thread(self._complete, prompt)

    def _headers(self) -> dict:
        headers = {
            "content-type": "application/json",
            "anthropic-version": ANTHROPIC_VERSION,
        }
        if self.api_key:
            headers["x-api-key"] = self.api_key
        return headers

    def _complete(self, prompt: str) -> str:
        body = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        logger.info("Requesting completion from %s", self.model)
        try:
            resp = requests.post(self.api_url, json=body, headers=self._headers(), timeout=self.timeout)
        except requests.Timeout as e:
            raise RequestTimeout() from e
        except requests.RequestException as e:
            raise NetworkError(f"Could not reach the completion API: {e}") from e

        if not resp.ok:
            try:
                data = resp.json()
            except ValueError:
                data = {}
            error = data.get("error") if isinstance(data, dict) else None
            message = error.get("message") if isinstance(error, dict) else None
            logger.warning("Completion API returned %s: %s", resp.status_code, message)
            raise ProviderError(message or f"API Error: {resp.status_code}", status_code=resp.status_code)

        try:
            data = resp.json()
        except ValueError as e:
            raise EmptyResponse() from e
        if not isinstance(data, dict):
            raise EmptyResponse()

        error = data.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise ProviderError(message or None, status_code=resp.status_code)

        text = "\n".join(
            item["text"]
            for item in data.get("content") or []
            if isinstance(item, dict) and item.get("type") == "text" and isinstance(item.get("text"), str)
        )
        if not text:
            raise EmptyResponse()
        return text


class GeminiCompletionClient:
    def __init__(self, api_key: str, model: Optional[str] = None, max_tokens: int = MAX_TOKENS):
        genai.configure(api_key=api_key)
        self.model = model
        self.max_tokens = max_tokens
        self._model_name: Optional[str] = None

    def _pick_model(self) -> str:
        """
        Detect available models on this API key and pick one that supports generateContent.
        Preference: the configured model > gemini-2.0-flash > gemini-1.5-flash > any 'flash' > any.
        """
        models = list(genai.list_models())
        gen_models = [m for m in models if "generateContent" in getattr(m, "supported_generation_methods", [])]
        if not gen_models:
            raise ProviderError("No Gemini models with generateContent are available to this API key.")

        names = [m.name for m in gen_models]
        simple = [n.split("/")[-1] for n in names]

        desired = self.model
        if desired:
            if desired in simple:
                return f"models/{desired}"
            if desired.startswith("models/") and desired.split("/")[-1] in simple:
                return desired

        preferences: List[str] = [
            "gemini-2.0-flash",
            "gemini-1.5-flash",
        ]
        for p in preferences:
            if p in simple:
                return f"models/{p}"

        for s in simple:
            if "flash" in s:
                return f"models/{s}"
        return names[0]

    async def complete(self, prompt: str) -> str:
        return await asyncio.to_thread(self._complete, prompt)

    def _complete(self, prompt: str) -> str:
        try:
            if self._model_name is None:
                self._model_name = self._pick_model()
            logger.info("Requesting completion from %s", self._model_name)
            model = genai.GenerativeModel(self._model_name)
            resp = model.generate_content(
                prompt, generation_config={"max_output_tokens": self.max_tokens}
            )
        except google_exceptions.GoogleAPIError as e:
            raise ProviderError(str(e)) from e

        try:
            text = resp.text or ""
        except ValueError as e:
            # Raised when the candidate was blocked or has no parts.
            raise EmptyResponse() from e
        if not text:
            raise EmptyResponse()
        return text


def get_completion_client(settings: Settings) -> CompletionClient:
    if settings.completion_provider == "gemini":
        if not settings.gemini_api_key:
            raise RuntimeError("Set GEMINI_API_KEY or GOOGLE_API_KEY in .env")
        return GeminiCompletionClient(
            settings.gemini_api_key,
            model=settings.gemini_model,
            max_tokens=settings.completion_max_tokens,
        )
    if settings.completion_provider == "anthropic":
        if not settings.anthropic_api_key:
            raise RuntimeError("Set ANTHROPIC_API_KEY in .env")
        return AnthropicCompletionClient(
            settings.anthropic_api_key,
            model=settings.completion_model,
            max_tokens=settings.completion_max_tokens,
            api_url=settings.anthropic_api_url,
            timeout=settings.completion_timeout,
        )
    raise RuntimeError(f"Unknown COMPLETION_PROVIDER: {settings.completion_provider}")
