"""
Zero-shot labeling with a remote chat-completion model.

Each document is turned into a natural-language instruction, sent as a
single user message to an OpenAI-compatible chat-completion endpoint,
and the first returned message is parsed as the label ("0" or "1").

Documents are labeled by a bounded thread pool. Every document has its
own deadline; transient failures (timeouts, connection errors, HTTP 429
and 5xx) are retried with exponential backoff until the retry budget or
the deadline runs out. A document that still fails, or whose answer is
not a label, is recorded as unscored and the batch carries on. Only
configuration problems (missing or rejected credentials) abort the run.
"""

from __future__ import annotations

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

import requests

from textasdata.errors import (
    ConfigurationError,
    DocumentScoringError,
    MalformedResponseError,
    TransientRequestError,
)
from textasdata.utils.runtime import load_yaml_config


logger = logging.getLogger(__name__)

DEFAULT_LLM_CONFIG_PATH = "config/llm.yaml"
DEFAULT_ENDPOINT = "https://api.openai.com/v1/chat/completions"
DEFAULT_PROMPT_TEMPLATE = (
    "Classify the sentiment of the following movie review. "
    "Answer 1 if the review is positive and 0 if it is negative. "
    "Reply with the single digit only.\n\n"
    "Review: {text}"
)

VALID_ANSWERS = {"0": 0, "1": 1}


def load_llm_config(config_path: str = DEFAULT_LLM_CONFIG_PATH) -> Dict[str, Any]:
    return load_yaml_config(config_path, required_sections=("model",))


def build_prompt(text: str, template: str = DEFAULT_PROMPT_TEMPLATE) -> str:
    """Fill the ``{text}`` placeholder of a prompt template."""
    if "{text}" not in template:
        raise ConfigurationError("Prompt template must contain a {text} placeholder.")
    return template.replace("{text}", text)


def parse_label(content: str) -> int:
    """
    Interpret a model answer as a binary label.

    Raises
    ------
    MalformedResponseError
        If the stripped answer is not exactly "0" or "1".
    """
    answer = (content or "").strip()
    if answer not in VALID_ANSWERS:
        shown = answer if len(answer) <= 40 else answer[:40] + "..."
        raise MalformedResponseError(f"Expected '0' or '1', got {shown!r}")
    return VALID_ANSWERS[answer]


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


@dataclass
class ChatCompletionClient:
    """
    Minimal client for an OpenAI-compatible chat-completion endpoint.

    Parameters
    ----------
    endpoint : str
        Full URL of the chat-completions route.
    model : str
        Model identifier sent with every request.
    api_key : str
        Bearer token.
    timeout_s : float
        Default per-request timeout in seconds.
    temperature : Optional[float]
        Sampling temperature; omitted from the payload when None.
    session : Any
        requests.Session (or compatible object exposing ``post``).
    """

    endpoint: str
    model: str
    api_key: str
    timeout_s: float = 30.0
    temperature: Optional[float] = 0.0
    session: Any = None

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ConfigurationError("An API key is required for the chat-completion client.")
        if self.session is None:
            self.session = requests.Session()

    @classmethod
    def from_config(
        cls,
        cfg: Mapping[str, Any],
        session: Any = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ChatCompletionClient":
        """
        Build a client from the "model" and "request" sections of
        config/llm.yaml, reading the API key from the configured
        environment variable.

        Raises
        ------
        ConfigurationError
            If the environment variable is unset or empty.
        """
        environ = os.environ if environ is None else environ
        model_cfg = cfg.get("model", {}) or {}
        request_cfg = cfg.get("request", {}) or {}

        key_var = model_cfg.get("api_key_env", "OPENAI_API_KEY")
        api_key = environ.get(key_var, "")
        if not api_key:
            raise ConfigurationError(
                f"Missing credentials: environment variable {key_var} is not set."
            )

        return cls(
            endpoint=model_cfg.get("endpoint", DEFAULT_ENDPOINT),
            model=str(model_cfg.get("name", "gpt-4o-mini")),
            api_key=api_key,
            timeout_s=float(request_cfg.get("timeout_s", 30.0)),
            temperature=model_cfg.get("temperature", 0.0),
            session=session,
        )

    def complete(self, prompt: str, timeout_s: Optional[float] = None) -> str:
        """
        Send one user message and return the first completion's text.

        Raises
        ------
        TransientRequestError
            Timeout, connection failure (including a body cut off
            mid-transfer), HTTP 429 or 5xx.
        ConfigurationError
            HTTP 401/403 (credentials rejected).
        DocumentScoringError
            Any other HTTP or transport error.
        MalformedResponseError
            The body is not a chat-completion response.
        """
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
        }
        if self.temperature is not None:
            payload["temperature"] = self.temperature

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            response = self.session.post(
                self.endpoint,
                json=payload,
                headers=headers,
                timeout=self.timeout_s if timeout_s is None else timeout_s,
            )
        except (requests.Timeout, requests.ConnectionError, requests.exceptions.ChunkedEncodingError) as exc:
            raise TransientRequestError(f"{type(exc).__name__}: {exc}") from exc
        except requests.RequestException as exc:
            raise DocumentScoringError(f"{type(exc).__name__}: {exc}") from exc

        status = response.status_code
        if status in (401, 403):
            raise ConfigurationError(f"Endpoint rejected the credentials (HTTP {status}).")
        if status == 429 or status >= 500:
            raise TransientRequestError(f"HTTP {status} from {self.endpoint}")
        if status >= 400:
            raise DocumentScoringError(f"HTTP {status} from {self.endpoint}")

        try:
            body = response.json()
            content = body["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise MalformedResponseError(f"Unexpected response body: {exc!r}") from exc
        except requests.RequestException as exc:
            raise DocumentScoringError(f"Could not read response body: {exc}") from exc

        if not isinstance(content, str):
            raise MalformedResponseError(f"Message content is {type(content).__name__}, not text")
        return content


# ---------------------------------------------------------------------------
# Batch labeling
# ---------------------------------------------------------------------------


@dataclass
class DocumentFailure:
    index: int
    error: str
    message: str


@dataclass
class LabelingResult:
    """Per-document labels in input order; None marks an unscored document."""

    predictions: List[Optional[int]]
    failures: List[DocumentFailure] = field(default_factory=list)

    @property
    def n_documents(self) -> int:
        return len(self.predictions)

    @property
    def n_scored(self) -> int:
        return sum(p is not None for p in self.predictions)


class ZeroShotLabeler:
    """
    Label texts with a chat-completion client.

    Parameters
    ----------
    client : ChatCompletionClient
        Anything with ``complete(prompt, timeout_s=None) -> str``.
    prompt_template : str
        Template with a ``{text}`` placeholder.
    max_workers : int
        Maximum number of documents in flight.
    max_retries : int
        Retries per document after the first attempt, for transient errors.
    backoff_s : float
        Base delay; the n-th retry waits ``backoff_s * 2 ** (n - 1)``.
    task_timeout_s : float
        Deadline per document covering all attempts and waits.
    """

    def __init__(
        self,
        client: Any,
        prompt_template: str = DEFAULT_PROMPT_TEMPLATE,
        max_workers: int = 4,
        max_retries: int = 3,
        backoff_s: float = 1.0,
        task_timeout_s: float = 120.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_workers < 1:
            raise ConfigurationError("max_workers must be at least 1.")
        build_prompt("", prompt_template)

        self.client = client
        self.prompt_template = prompt_template
        self.max_workers = int(max_workers)
        self.max_retries = int(max_retries)
        self.backoff_s = float(backoff_s)
        self.task_timeout_s = float(task_timeout_s)
        self._sleep = sleep
        self._clock = clock

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any], client: Any) -> "ZeroShotLabeler":
        request_cfg = cfg.get("request", {}) or {}
        return cls(
            client=client,
            prompt_template=cfg.get("prompt_template", DEFAULT_PROMPT_TEMPLATE),
            max_workers=int(request_cfg.get("max_workers", 4)),
            max_retries=int(request_cfg.get("max_retries", 3)),
            backoff_s=float(request_cfg.get("backoff_s", 1.0)),
            task_timeout_s=float(request_cfg.get("task_timeout_s", 120.0)),
        )

    def label_one(self, text: str) -> int:
        """
        Label a single text, retrying transient failures.

        Raises
        ------
        DocumentScoringError
            When the document cannot be labeled.
        """
        prompt = build_prompt(text, self.prompt_template)
        deadline = self._clock() + self.task_timeout_s
        attempt = 0

        while True:
            attempt += 1
            remaining = deadline - self._clock()
            if remaining <= 0:
                raise TransientRequestError(f"Deadline exceeded after {attempt - 1} attempt(s)")

            try:
                content = self.client.complete(prompt, timeout_s=remaining)
                return parse_label(content)
            except TransientRequestError as exc:
                if attempt > self.max_retries:
                    raise TransientRequestError(
                        f"Gave up after {attempt} attempt(s): {exc}"
                    ) from exc
                delay = self.backoff_s * (2 ** (attempt - 1))
                if self._clock() + delay >= deadline:
                    raise TransientRequestError(
                        f"Deadline exceeded after {attempt} attempt(s): {exc}"
                    ) from exc
                logger.debug("Attempt %d failed (%s); retrying in %.2fs", attempt, exc, delay)
                self._sleep(delay)

    def label(self, texts: Iterable[str]) -> LabelingResult:
        """
        Label every text, returning partial results.

        ConfigurationError raised by the client cancels pending documents
        and propagates; every other scoring error only marks its document
        as unscored.
        """
        texts = list(texts)
        result = LabelingResult(predictions=[None] * len(texts))
        if not texts:
            return result

        workers = min(self.max_workers, len(texts))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {pool.submit(self.label_one, text): i for i, text in enumerate(texts)}
            try:
                for future in as_completed(futures):
                    index = futures[future]
                    try:
                        result.predictions[index] = future.result()
                    except DocumentScoringError as exc:
                        logger.warning("Document %d left unscored: %s", index, exc)
                        result.failures.append(
                            DocumentFailure(index=index, error=type(exc).__name__, message=str(exc))
                        )
            except ConfigurationError:
                for pending in futures:
                    pending.cancel()
                raise

        result.failures.sort(key=lambda f: f.index)
        return result
