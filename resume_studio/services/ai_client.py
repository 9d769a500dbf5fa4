"""
AI Provider Client

Every supported provider exposes an OpenAI-compatible chat completions API,
so we use the openai library and only swap base_url / model.

COST OPTIMIZATION:
- Default model is the cheapest of each provider
- Cache deterministic prompts (job analysis) by content hash
- Never cache prompts whose output should vary (rewrites, recommendations)

AI is OPTIONAL: every caller catches AIServiceError and falls back to
rule-based output, so the API works without a key.
"""
import json
import re
import threading
from typing import Any, Optional

from loguru import logger
from openai import APIError, APIStatusError, OpenAI, RateLimitError

from resume_studio.core.config import get_settings
from resume_studio.core.errors import AINotConfiguredError, AIServiceError
from resume_studio.services.ai_cache import AICache, make_cache_key

# Provider presets: OpenAI-compatible endpoint + default (cheapest) model
PROVIDER_CONFIGS = {
    "openai": {"base_url": "https://api.openai.com/v1", "model": "gpt-4o-mini"},
    "deepseek": {"base_url": "https://api.deepseek.com/v1", "model": "deepseek-chat"},
    "perplexity": {"base_url": "https://api.perplexity.ai", "model": "sonar"},
    "google": {"base_url": "https://generativelanguage.googleapis.com/v1beta/openai/", "model": "gemini-1.5-flash"},
    "anthropic": {"base_url": "https://api.anthropic.com/v1/", "model": "claude-3-haiku-20240307"},
}

# USD per 1M tokens (gpt-4o-mini pricing, used as the estimate for all providers)
INPUT_COST_PER_1M = 0.15
OUTPUT_COST_PER_1M = 0.60

JSON_INSTRUCTION = "\n\nRespond with valid JSON only, no markdown formatting."
_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")


def extract_json(text: str) -> Any:
    """
    Parse JSON from a model response.
    Handles cases where the model wraps JSON in markdown code blocks.
    """
    match = _FENCE_RE.search(text)
    payload = match.group(1) if match else text
    return json.loads(payload.strip())


class AIClient:
    """
    Wrapper over an OpenAI-compatible chat API with caching and usage stats.
    """

    def __init__(self, provider: str = None, api_key: str = None, base_url: str = None,
                 model: str = None, cache: AICache = None):
        settings = get_settings()
        self.provider = (provider or settings.ai_provider).lower()
        preset = PROVIDER_CONFIGS.get(self.provider, PROVIDER_CONFIGS["openai"])

        self.api_key = api_key if api_key is not None else settings.ai_api_key
        self.base_url = base_url or settings.ai_base_url or preset["base_url"]
        self.model = model or settings.ai_model or preset["model"]
        self.cache = cache or AICache()

        self._client: Optional[OpenAI] = None
        self._stats_lock = threading.Lock()
        self.total_tokens = 0
        self.total_cost = 0.0

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def _get_client(self) -> OpenAI:
        if not self.enabled:
            raise AINotConfiguredError(
                f"No API key configured for AI provider '{self.provider}'. Set AI_API_KEY."
            )
        if self._client is None:
            self._client = OpenAI(api_key=self.api_key, base_url=self.base_url)
        return self._client

    def _track_usage(self, usage) -> None:
        if usage is None:
            return
        cost = (usage.prompt_tokens / 1_000_000) * INPUT_COST_PER_1M \
            + (usage.completion_tokens / 1_000_000) * OUTPUT_COST_PER_1M
        with self._stats_lock:
            self.total_tokens += usage.total_tokens
            self.total_cost += cost

    def call(self, prompt: str, system_prompt: str = None, temperature: float = 0.7,
             max_tokens: int = 2000, use_cache: bool = True) -> str:
        """
        Send one chat completion and return the text.

        Raises:
            AINotConfiguredError: no API key
            AIServiceError: provider error, rate limit or empty response
        """
        cache_key = make_cache_key(prompt, system_prompt)
        if use_cache:
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.debug(f"AI cache hit {cache_key[:12]}")
                return cached

        client = self._get_client()
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        try:
            response = client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except RateLimitError as e:
            raise AIServiceError("AI provider rate limit exceeded. Please try again later.") from e
        except APIStatusError as e:
            raise AIServiceError(f"AI provider error ({e.status_code}): {e.message}") from e
        except APIError as e:
            raise AIServiceError(f"AI provider error: {e}") from e

        self._track_usage(response.usage)

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise AIServiceError("Empty response from AI provider")

        if use_cache:
            self.cache.set(cache_key, content)
        return content

    def call_json(self, prompt: str, system_prompt: str = None, temperature: float = 0.3,
                  max_tokens: int = 2000, use_cache: bool = True) -> Any:
        """Call the model and parse its answer as JSON. Only parseable answers are cached."""
        prompt = prompt + JSON_INSTRUCTION
        cache_key = make_cache_key(prompt, system_prompt)
        cached = self.cache.get(cache_key) if use_cache else None

        content = cached if cached is not None else self.call(
            prompt,
            system_prompt=system_prompt,
            temperature=temperature,
            max_tokens=max_tokens,
            use_cache=False,
        )
        try:
            result = extract_json(content)
        except json.JSONDecodeError as e:
            raise AIServiceError(f"AI response was not valid JSON: {e}") from e

        if use_cache and cached is None:
            self.cache.set(cache_key, content)
        return result

    def get_stats(self) -> dict:
        with self._stats_lock:
            return {
                "provider": self.provider,
                "model": self.model,
                "total_tokens_used": self.total_tokens,
                "total_cost": round(self.total_cost, 6),
                "cache_size": self.cache.size(),
            }

    def test_connection(self) -> bool:
        """Test if the AI provider is reachable"""
        try:
            response = self.call(
                "Reply with exactly: OK",
                system_prompt="You are a test assistant.",
                max_tokens=10,
                use_cache=False,
            )
            return "OK" in response.upper()
        except AIServiceError as e:
            logger.error(f"AI provider connection failed: {e}")
            return False


# Singleton instance
_ai_client: Optional[AIClient] = None


def get_ai_client() -> AIClient:
    """Get or create the AI client (singleton pattern)"""
    global _ai_client
    if _ai_client is None:
        _ai_client = AIClient()
    return _ai_client
