"""
Blocking LLM clients behind the generation boundary.

LLMGenerator (scribe.contexts.ai.generation) renders a task's prompts and hands
them to a provider from a worker thread. Providers deal only in text: a system
prompt and a user prompt in, one completion out. Rate-limit errors are retried
here with exponential backoff; any other failure propagates so the generation
boundary can report it once per operation.

The helpers at the bottom recover JSON from completions for the structured
output shapes (items, review, document).
"""

import importlib
import json
import os
import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import partial
from types import ModuleType
from typing import Any, Callable, Dict, Optional, Tuple, Type, TypeVar, Union

from dotenv import load_dotenv
from loguru import logger

load_dotenv()

MAX_ATTEMPTS = 5
BASE_DELAY_S = 1.0

T = TypeVar("T")
ExceptionTypes = Union[Type[Exception], Tuple[Type[Exception], ...]]


def _retry_with_backoff(
    operation: Callable[[], T],
    retryable_exception: ExceptionTypes,
    label: str,
    max_attempts: int = MAX_ATTEMPTS,
    base_delay_s: float = BASE_DELAY_S,
) -> T:
    """
    Run operation, sleeping and retrying while it raises retryable_exception.

    Delays double from base_delay_s. The last failure propagates unchanged.

    Args:
        operation: Zero-argument callable making one API request
        retryable_exception: Exception type(s) worth retrying (an empty tuple retries nothing)
        label: Log prefix naming the provider and the condition
    """
    for attempt in range(1, max_attempts + 1):
        try:
            return operation()
        except retryable_exception:
            if attempt == max_attempts:
                raise
            delay = base_delay_s * 2 ** (attempt - 1)
            logger.warning(f"{label}; retry {attempt}/{max_attempts - 1} in {delay:.1f}s")
            time.sleep(delay)


def _import_sdk(module_name: str) -> ModuleType:
    """Import a provider SDK on first use; SDKs ship in the optional llm extra."""
    try:
        return importlib.import_module(module_name)
    except ImportError as e:
        raise ImportError(f"{module_name} package required. Install with: pip install 'scribe[llm]'") from e


# --- Providers ---


@dataclass
class LLMResponse:
    """One completion with its token usage."""

    content: str
    model: str
    input_tokens: int = 0
    output_tokens: int = 0


class LLMProvider(ABC):
    """
    Text-in, text-out completion client.

    Subclasses declare provider_prefix, default_model and (for hosted APIs)
    api_key_env, then implement _connect() to build the SDK client and
    _call_api() for a single request. _connect() may set retryable_exception
    to the SDK's rate-limit error.
    """

    provider_prefix: str = ""
    default_model: str = ""
    api_key_env: Optional[str] = None
    retry_label: str = "Rate limited"
    retryable_exception: ExceptionTypes = ()

    def __init__(self, model: Optional[str] = None, max_tokens: int = 2048):
        self.model = model or self.default_model
        self.max_tokens = max_tokens
        self.client = self._connect(self._api_key())

    @property
    def name(self) -> str:
        """Provider and model, as recorded in generation logs (e.g. "openai/gpt-4o-mini")."""
        return f"{self.provider_prefix}/{self.model}"

    def _api_key(self) -> Optional[str]:
        if self.api_key_env is None:
            return None
        api_key = os.getenv(self.api_key_env)
        if not api_key:
            raise ValueError(f"{self.api_key_env} environment variable not set")
        return api_key

    @abstractmethod
    def _connect(self, api_key: Optional[str]) -> Any:
        """Create the SDK client."""

    @abstractmethod
    def _call_api(self, system_prompt: str, user_prompt: str) -> LLMResponse:
        """One request, no retries."""

    def generate(self, system_prompt: str, user_prompt: str) -> LLMResponse:
        """Complete a prompt pair, retrying rate-limit errors with backoff."""
        return _retry_with_backoff(
            partial(self._call_api, system_prompt, user_prompt),
            self.retryable_exception,
            f"{self.name}: {self.retry_label}",
        )


class AnthropicProvider(LLMProvider):
    provider_prefix = "anthropic"
    default_model = "claude-sonnet-4-20250514"
    api_key_env = "ANTHROPIC_API_KEY"
    retry_label = "API overloaded"

    def _connect(self, api_key: Optional[str]) -> Any:
        anthropic = _import_sdk("anthropic")
        self.retryable_exception = anthropic.RateLimitError
        return anthropic.Anthropic(api_key=api_key)

    def _call_api(self, system_prompt: str, user_prompt: str) -> LLMResponse:
        response = self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
        )
        text = "".join(block.text for block in response.content if getattr(block, "type", "text") == "text")
        return LLMResponse(
            content=text,
            model=self.model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )


class OpenAIProvider(LLMProvider):
    provider_prefix = "openai"
    default_model = "gpt-4o-mini"
    api_key_env = "OPENAI_API_KEY"

    def _connect(self, api_key: Optional[str]) -> Any:
        openai = _import_sdk("openai")
        self.retryable_exception = openai.RateLimitError
        return openai.OpenAI(api_key=api_key)

    def _call_api(self, system_prompt: str, user_prompt: str) -> LLMResponse:
        response = self.client.chat.completions.create(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        )
        usage = response.usage
        return LLMResponse(
            content=response.choices[0].message.content or "",
            model=self.model,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
        )


PROVIDERS: Dict[str, Type[LLMProvider]] = {
    "anthropic": AnthropicProvider,
    "openai": OpenAIProvider,
}


def get_provider(provider_name: Optional[str] = None, model: Optional[str] = None) -> LLMProvider:
    """
    Build the provider named in AIConfig.provider (or LLM_PROVIDER).

    Args:
        provider_name: Key of PROVIDERS; None reads LLM_PROVIDER (default "openai")
        model: Model name; None selects the provider default

    Raises:
        ValueError: For an unknown provider or a missing API key
    """
    provider_name = (provider_name or os.getenv("LLM_PROVIDER", "openai")).lower()
    provider_cls = PROVIDERS.get(provider_name)
    if provider_cls is None:
        raise ValueError(f"Unknown provider: {provider_name}. Use one of: {', '.join(sorted(PROVIDERS))}")
    return provider_cls(model=model)


# --- Response parsing ---


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```json ... ``` block if present."""
    text = text.strip()
    text = re.sub(r"^```(?:json)?\s*", "", text)
    return re.sub(r"\s*```$", "", text)


def parse_json_response(text: str) -> Optional[Any]:
    """
    Parse a JSON value from an LLM response with fallbacks.

    Tries, in order: the raw text, the text without markdown code fences, and the
    outermost {...} or [...] span found in the text.

    Args:
        text: LLM response text

    Returns:
        Parsed JSON value, or None if nothing parseable was found
    """
    if not text:
        return None

    candidates = [text.strip(), strip_code_fences(text)]
    for open_char, close_char in (("{", "}"), ("[", "]")):
        start = text.find(open_char)
        end = text.rfind(close_char)
        if start != -1 and end > start:
            candidates.append(text[start : end + 1])

    for candidate in candidates:
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            continue

    return None
