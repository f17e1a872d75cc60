"""
Tests for zero-shot labeling.

No network access is needed: the HTTP session and the model client are
replaced with small fakes, and retry waits use a fake clock.
"""

from __future__ import annotations

import threading
import time
from typing import Dict, List

import pytest
import requests

from textasdata.errors import (
    ConfigurationError,
    DocumentScoringError,
    MalformedResponseError,
    TransientRequestError,
)
from textasdata.models.llm import (
    ChatCompletionClient,
    DocumentFailure,
    ZeroShotLabeler,
    build_prompt,
    parse_label,
)


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeResponse:
    def __init__(self, status_code: int = 200, body=None):
        self.status_code = status_code
        self._body = body

    def json(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


def completion(content: str) -> FakeResponse:
    return FakeResponse(200, {"choices": [{"message": {"role": "assistant", "content": content}}]})


class FakeSession:
    """Returns (or raises) the queued outcomes in order."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls: List[Dict] = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class KeywordClient:
    """Answers "1" when the prompt contains "good", "0" otherwise."""

    model = "fake"

    def __init__(self, answers=None):
        self.answers = answers or {}
        self.calls: Dict[str, int] = {}
        self._lock = threading.Lock()

    def complete(self, prompt, timeout_s=None):
        with self._lock:
            self.calls[prompt] = self.calls.get(prompt, 0) + 1
        for marker, answer in self.answers.items():
            if marker in prompt:
                if isinstance(answer, Exception):
                    raise answer
                return answer
        return "1" if "good" in prompt else "0"


class FakeClock:
    def __init__(self):
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def make_client(session) -> ChatCompletionClient:
    return ChatCompletionClient(
        endpoint="http://localhost/v1/chat/completions",
        model="test-model",
        api_key="secret",
        session=session,
    )


# ---------------------------------------------------------------------------
# Prompt and answer parsing
# ---------------------------------------------------------------------------


def test_build_prompt_requires_placeholder():
    assert build_prompt("nice", "Review: {text}") == "Review: nice"
    with pytest.raises(ConfigurationError):
        build_prompt("nice", "Review without placeholder")


@pytest.mark.parametrize("answer,expected", [("1", 1), (" 0\n", 0)])
def test_parse_label(answer, expected):
    assert parse_label(answer) == expected


@pytest.mark.parametrize("answer", ["", "positive", "1.", "10"])
def test_parse_label_rejects_other_answers(answer):
    with pytest.raises(MalformedResponseError):
        parse_label(answer)


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


def test_client_from_config_requires_api_key():
    cfg = {"model": {"api_key_env": "TEXTASDATA_TEST_KEY"}}
    with pytest.raises(ConfigurationError):
        ChatCompletionClient.from_config(cfg, environ={})

    client = ChatCompletionClient.from_config(
        cfg, session=FakeSession([]), environ={"TEXTASDATA_TEST_KEY": "k"}
    )
    assert client.api_key == "k"


def test_client_sends_single_user_message():
    session = FakeSession([completion("1")])
    client = make_client(session)

    assert client.complete("Is it good?", timeout_s=5) == "1"

    call = session.calls[0]
    assert call["json"]["model"] == "test-model"
    assert call["json"]["messages"] == [{"role": "user", "content": "Is it good?"}]
    assert call["headers"]["Authorization"] == "Bearer secret"
    assert call["timeout"] == 5


@pytest.mark.parametrize(
    "outcome,error",
    [
        (FakeResponse(429, {}), TransientRequestError),
        (FakeResponse(503, {}), TransientRequestError),
        (requests.Timeout("slow"), TransientRequestError),
        (requests.ConnectionError("down"), TransientRequestError),
        (requests.exceptions.ChunkedEncodingError("cut off"), TransientRequestError),
        (requests.TooManyRedirects("loop"), DocumentScoringError),
        (FakeResponse(401, {}), ConfigurationError),
        (FakeResponse(400, {}), DocumentScoringError),
        (FakeResponse(200, {"choices": []}), MalformedResponseError),
        (FakeResponse(200, ValueError("not json")), MalformedResponseError),
    ],
)
def test_client_error_mapping(outcome, error):
    client = make_client(FakeSession([outcome]))
    with pytest.raises(error):
        client.complete("prompt")


# ---------------------------------------------------------------------------
# Labeler
# ---------------------------------------------------------------------------


def test_labeler_preserves_input_order():
    texts = [f"{'good' if i % 3 else 'poor'} review {i}" for i in range(20)]
    labeler = ZeroShotLabeler(KeywordClient(), "Review: {text}", max_workers=4)

    result = labeler.label(texts)

    assert result.predictions == [1 if i % 3 else 0 for i in range(20)]
    assert result.failures == []
    assert result.n_scored == 20


def test_labeler_retries_rate_limited_requests():
    clock = FakeClock()
    session = FakeSession([FakeResponse(429, {}), completion("1")])
    labeler = ZeroShotLabeler(
        make_client(session),
        "Review: {text}",
        max_workers=1,
        max_retries=3,
        backoff_s=0.5,
        sleep=clock.sleep,
        clock=clock,
    )

    result = labeler.label(["good"])

    assert result.predictions == [1]
    assert len(session.calls) == 2
    assert clock.sleeps == [0.5]


def test_labeler_gives_up_after_retries():
    clock = FakeClock()
    session = FakeSession([requests.Timeout("slow")] * 3)
    labeler = ZeroShotLabeler(
        make_client(session),
        "Review: {text}",
        max_retries=2,
        backoff_s=1.0,
        sleep=clock.sleep,
        clock=clock,
    )

    result = labeler.label(["good"])

    assert result.predictions == [None]
    assert result.failures[0].error == "TransientRequestError"
    assert len(session.calls) == 3
    assert clock.sleeps == [1.0, 2.0]


def test_labeler_respects_task_deadline():
    clock = FakeClock()
    session = FakeSession([FakeResponse(503, {})] * 10)
    labeler = ZeroShotLabeler(
        make_client(session),
        "Review: {text}",
        max_retries=5,
        backoff_s=1.0,
        task_timeout_s=2.5,
        sleep=clock.sleep,
        clock=clock,
    )

    result = labeler.label(["good"])

    assert result.predictions == [None]
    assert len(session.calls) == 2
    assert clock.sleeps == [1.0]


def test_malformed_answer_leaves_document_unscored_without_retry():
    client = KeywordClient(answers={"weird": "maybe"})
    labeler = ZeroShotLabeler(client, "Review: {text}", max_workers=2, sleep=lambda s: None)

    result = labeler.label(["good one", "weird one", "poor one"])

    assert result.predictions == [1, None, 0]
    assert [f.index for f in result.failures] == [1]
    assert result.failures[0].error == "MalformedResponseError"
    assert client.calls["Review: weird one"] == 1


def test_failure_record_names_position_error_and_message():
    client = KeywordClient(answers={"weird": "maybe"})
    labeler = ZeroShotLabeler(client, "Review: {text}", max_workers=1, sleep=lambda s: None)

    result = labeler.label(["good one", "weird one"])

    assert result.failures == [
        DocumentFailure(index=1, error="MalformedResponseError", message="Expected '0' or '1', got 'maybe'")
    ]


def test_configuration_error_aborts_labeling():
    client = KeywordClient(answers={"": ConfigurationError("rejected key")})
    labeler = ZeroShotLabeler(client, "Review: {text}", max_workers=2)

    with pytest.raises(ConfigurationError):
        labeler.label(["good", "bad"])


def test_labeler_from_config():
    cfg = {
        "prompt_template": "T: {text}",
        "request": {"max_workers": 2, "max_retries": 1, "backoff_s": 0.1, "task_timeout_s": 9},
    }
    labeler = ZeroShotLabeler.from_config(cfg, client=KeywordClient())

    assert labeler.max_workers == 2
    assert labeler.max_retries == 1
    assert labeler.task_timeout_s == 9.0
    assert labeler.label([]).predictions == []


def test_broken_transfer_leaves_only_that_document_unscored():
    session = FakeSession(
        [
            completion("1"),
            requests.exceptions.ChunkedEncodingError("connection broken mid-body"),
            completion("1"),
        ]
    )
    labeler = ZeroShotLabeler(make_client(session), "Review: {text}", max_workers=1, max_retries=0)

    result = labeler.label(["good", "also good", "still good"])

    assert result.predictions == [1, None, 1]
    assert [f.index for f in result.failures] == [1]
    assert result.failures[0].error == "TransientRequestError"


def test_other_transport_errors_are_not_retried():
    session = FakeSession([requests.TooManyRedirects("loop"), completion("0")])
    labeler = ZeroShotLabeler(make_client(session), "Review: {text}", max_workers=1)

    result = labeler.label(["a", "b"])

    assert result.predictions == [None, 0]
    assert result.failures[0].error == "DocumentScoringError"
    assert len(session.calls) == 2


def test_prompt_template_may_contain_other_braces():
    template = 'Answer as JSON {"label": 0 or 1}.\nReview: {text}'
    assert build_prompt("nice", template) == 'Answer as JSON {"label": 0 or 1}.\nReview: nice'

    labeler = ZeroShotLabeler(KeywordClient(), template)
    assert labeler.label(["good"]).predictions == [1]


class SlowCountingClient:
    """Tracks how many complete() calls run at the same time."""

    model = "fake"

    def __init__(self, delay_s: float = 0.02):
        self.delay_s = delay_s
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def complete(self, prompt, timeout_s=None):
        with self._lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            time.sleep(self.delay_s)
            return "1"
        finally:
            with self._lock:
                self.in_flight -= 1


@pytest.mark.parametrize("max_workers", [1, 3])
def test_max_workers_bounds_documents_in_flight(max_workers):
    client = SlowCountingClient()
    labeler = ZeroShotLabeler(client, "Review: {text}", max_workers=max_workers)

    result = labeler.label([f"doc {i}" for i in range(12)])

    assert result.n_scored == 12
    assert 1 <= client.max_in_flight <= max_workers
