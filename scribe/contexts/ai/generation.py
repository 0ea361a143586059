"""
Generation boundary.

The engine talks to text generation through one async callable:

    Generator = async (task, payload, output_shape) -> result

where result matches the requested OutputShape:

    TEXT      str
    ITEMS     {"items": [ {field_id: value}, ... ], "summary": str}
    REVIEW    {"overallQuality": str, "suggestions": [...]}
    DOCUMENT  {"sections": [ {"schemaId": str, "items": [...]}, ... ]}

Any callable with that signature works (tests use plain async functions).
LLMGenerator is the production implementation on top of utils.llm providers.

Every call goes through call_generator, which adds cancellation and timeouts and
turns backend exceptions into a single GenerationError.
"""

import asyncio
import json
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template

from scribe.contexts.ai.logger import log_generation_start
from scribe.utils.config import AIConfig
from scribe.utils.llm import LLMProvider, get_provider, parse_json_response

PROMPTS_PATH = Path(__file__).resolve().parent / "prompts"


class GenerationTask(str, Enum):
    IMPROVE_FIELD = "improve_field"
    AUTOCOMPLETE = "autocomplete"
    BATCH_IMPROVE = "batch_improve"
    REVIEW = "review"
    GENERATE_DOCUMENT = "generate_document"
    COVER_LETTER = "cover_letter"


class OutputShape(str, Enum):
    TEXT = "text"
    ITEMS = "items"
    REVIEW = "review"
    DOCUMENT = "document"


Generator = Callable[[GenerationTask, Dict[str, Any], OutputShape], Awaitable[Any]]


# --- Errors ---


class GenerationError(Exception):
    """
    Exception raised when the generation backend fails an operation.

    Attributes:
        task: Task that failed
        message: Error description
        original_error: Exception raised by the backend, if any
    """

    def __init__(self, task, message: str, original_error: Optional[Exception] = None):
        self.task = task
        self.message = message
        self.original_error = original_error

        task_name = task.value if isinstance(task, Enum) else str(task)
        parts = [f"{task_name}: {message}"]
        if original_error is not None:
            parts.append(f"Caused by: {type(original_error).__name__}: {original_error}")

        super().__init__("\n".join(parts))


class GenerationCancelledError(GenerationError):
    """Raised when the caller cancels a pending generation."""


class GenerationTimeoutError(GenerationError):
    """Raised when a generation does not finish within the configured timeout."""


# --- Cancellation ---


class CancellationToken:
    """
    Caller-held handle for abandoning one pending AI request.

    Example:
        token = CancellationToken()
        task = asyncio.create_task(registry.improve_field(..., cancel_token=token))
        token.cancel()   # improve_field raises GenerationCancelledError
    """

    def __init__(self):
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()


async def call_generator(
    generator: Generator,
    task: GenerationTask,
    payload: Dict[str, Any],
    shape: OutputShape,
    cancel_token: Optional[CancellationToken] = None,
    timeout_s: Optional[float] = None,
) -> Any:
    """
    Await one generator call, racing it against cancellation and a timeout.

    Args:
        generator: Backend callable
        task: Task being requested
        payload: Structured input for the backend
        shape: Expected output shape
        cancel_token: Optional token; cancelling it abandons the call
        timeout_s: Optional upper bound in seconds

    Returns:
        Whatever the generator returned

    Raises:
        GenerationCancelledError: Token cancelled before the result arrived
        GenerationTimeoutError: No result within timeout_s
        GenerationError: Generator raised
    """
    if cancel_token is not None and cancel_token.cancelled:
        raise GenerationCancelledError(task, "Cancelled before the request was sent")

    generation = asyncio.ensure_future(generator(task, payload, shape))
    waiters = {generation}
    cancel_waiter = None
    if cancel_token is not None:
        cancel_waiter = asyncio.ensure_future(cancel_token.wait())
        waiters.add(cancel_waiter)

    try:
        done, _ = await asyncio.wait(waiters, timeout=timeout_s, return_when=asyncio.FIRST_COMPLETED)
    finally:
        if cancel_waiter is not None:
            cancel_waiter.cancel()

    if generation not in done:
        generation.cancel()
        if cancel_token is not None and cancel_token.cancelled:
            raise GenerationCancelledError(task, "Cancelled by caller")
        raise GenerationTimeoutError(task, f"No response within {timeout_s}s")

    try:
        return generation.result()
    except GenerationError:
        raise
    except Exception as e:
        raise GenerationError(task, "Generator failed", original_error=e) from e


# --- Prompt templates ---


class PromptRegistry:
    """
    Registry for loading and caching Jinja2 prompt templates.

    Templates live in prompts/<task>/system.md.jinja and prompts/<task>/user.md.jinja.
    StrictUndefined makes a payload missing a referenced key fail loudly instead of
    rendering an empty string into the prompt.
    """

    def __init__(self, prompts_path: Path = None):
        self.prompts_path = Path(prompts_path or PROMPTS_PATH)
        self._cache: Dict[str, Template] = {}
        self.env = Environment(
            loader=FileSystemLoader(str(self.prompts_path)),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
        )
        self.env.filters["tojson_pretty"] = lambda value: json.dumps(value, indent=2, ensure_ascii=False)

    def get_template(self, task: GenerationTask, part: str) -> Template:
        """
        Get a prompt template, loading and caching it if necessary.

        Args:
            task: Task whose prompts to load
            part: "system" or "user"

        Raises:
            TemplateNotFound: If the template file doesn't exist
        """
        name = f"{GenerationTask(task).value}/{part}.md.jinja"
        if name not in self._cache:
            self._cache[name] = self.env.get_template(name)
        return self._cache[name]

    def render(self, task: GenerationTask, payload: Dict[str, Any]) -> Tuple[str, str]:
        """Render (system_prompt, user_prompt) for a task."""
        system_prompt = self.get_template(task, "system").render(**payload)
        user_prompt = self.get_template(task, "user").render(**payload)
        return system_prompt.strip(), user_prompt.strip()

    def clear_cache(self) -> None:
        self._cache.clear()

    def is_cached(self, task: GenerationTask, part: str) -> bool:
        return f"{GenerationTask(task).value}/{part}.md.jinja" in self._cache


# --- LLM-backed generator ---


class LLMGenerator:
    """
    Generator backed by an LLMProvider (OpenAI or Anthropic).

    Provider SDK calls are blocking and retried with backoff inside the provider,
    so they run in a worker thread to keep the event loop free.
    """

    def __init__(self, provider: LLMProvider = None, prompts: PromptRegistry = None):
        self.provider = provider or get_provider()
        self.prompts = prompts or PromptRegistry()

    @classmethod
    def from_config(cls, config: AIConfig) -> "LLMGenerator":
        return cls(provider=get_provider(config.provider, config.model))

    async def __call__(self, task: GenerationTask, payload: Dict[str, Any], shape: OutputShape) -> Any:
        system_prompt, user_prompt = self.prompts.render(task, payload)
        log_generation_start(GenerationTask(task).value, self.provider.name)

        response = await asyncio.to_thread(self.provider.generate, system_prompt, user_prompt)

        if shape == OutputShape.TEXT:
            return response.content.strip()

        parsed = parse_json_response(response.content)
        if parsed is None:
            raise GenerationError(task, "Response was not valid JSON")
        return normalize_output(parsed, shape)


def normalize_output(parsed: Any, shape: OutputShape) -> Any:
    """
    Coerce common variations of model output into the documented shape.

    Models sometimes wrap the item list ({"improvedSection": {"items": [...]}}),
    return it JSON-encoded in a string field, or return a bare list.
    """
    if shape == OutputShape.ITEMS:
        if isinstance(parsed, list):
            return {"items": parsed, "summary": ""}
        if not isinstance(parsed, dict):
            return parsed

        summary = parsed.get("summary") or parsed.get("improvementSummary") or ""
        if "items" in parsed:
            return {"items": parsed["items"], "summary": summary}
        section = parsed.get("improvedSection")
        if isinstance(parsed.get("improvedSectionJson"), str):
            section = parse_json_response(parsed["improvedSectionJson"])
        if isinstance(section, dict) and "items" in section:
            return {"items": section["items"], "summary": summary}
        return parsed

    if shape == OutputShape.DOCUMENT and isinstance(parsed, list):
        return {"sections": parsed}

    return parsed
