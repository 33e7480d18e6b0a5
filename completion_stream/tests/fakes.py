"""Fake SDK pieces shared by the streaming, pool and health tests.

They mirror the parts of ``openai.AsyncOpenAI`` the package touches:
``chat.completions.create(**params)`` returning an async-iterable stream with
``close()``, ``models.list()``, and ``close()`` on the client itself.
"""

from __future__ import annotations

import asyncio
from collections import deque
from types import SimpleNamespace
from typing import Any, Iterable, List, Optional

from completion_stream.base.tokens import TokenCounter


def make_chunk(content: Optional[str] = None, reasoning: Optional[str] = None) -> SimpleNamespace:
    delta = SimpleNamespace(content=content, reasoning_content=reasoning)
    return SimpleNamespace(choices=[SimpleNamespace(delta=delta)])


class FakeStream:
    """Async-iterable chunk stream; optionally raises after the last chunk.

    With ``trace`` set, every read appends ``label`` to it and yields to the
    event loop, so concurrent streams interleave.
    """

    def __init__(
        self,
        chunks: Iterable[Any],
        *,
        error: Optional[BaseException] = None,
        trace: Optional[List[str]] = None,
        label: str = "",
    ) -> None:
        self._chunks = list(chunks)
        self.error = error
        self.trace = trace
        self.label = label
        self.read = 0
        self.closed = False

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for chunk in self._chunks:
            self.read += 1
            if self.trace is not None:
                self.trace.append(self.label)
                await asyncio.sleep(0)
            yield chunk
        if self.error is not None:
            raise self.error

    async def close(self) -> None:
        self.closed = True


class FakeSDKClient:
    def __init__(self, provider: "FakeProvider", endpoint: str, api_key: str) -> None:
        self.provider = provider
        self.endpoint = endpoint
        self.api_key = api_key
        self.closed = False
        self.close_error: Optional[BaseException] = None
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))
        self.models = SimpleNamespace(list=self._list_models)

    async def _create(self, **params: Any) -> Any:
        self.provider.calls.append(params)
        response = self.provider.next_response()
        if isinstance(response, BaseException):
            raise response
        return response

    async def _list_models(self) -> Any:
        if isinstance(self.provider.models, BaseException):
            raise self.provider.models
        return SimpleNamespace(data=[SimpleNamespace(id=m) for m in self.provider.models])

    async def close(self) -> None:
        if self.close_error is not None:
            raise self.close_error
        self.closed = True


class FakeProvider:
    """Client factory for the pool that records every client it builds."""

    def __init__(self) -> None:
        self.clients: List[FakeSDKClient] = []
        self.calls: List[dict] = []
        self.responses: deque = deque()
        self.models: Any = ["test-model"]

    def enqueue(self, *responses: Any) -> None:
        self.responses.extend(responses)

    def next_response(self) -> Any:
        if not self.responses:
            raise AssertionError("no scripted response left")
        return self.responses.popleft()

    def __call__(self, endpoint: str, api_key: str, timeout_config: Any) -> FakeSDKClient:
        client = FakeSDKClient(self, endpoint, api_key)
        self.clients.append(client)
        return client


class WordTokenCounter(TokenCounter):
    """Counts whitespace-separated words; keeps tests off tiktoken downloads."""

    def count_sync(self, text: str, model_type: Optional[str] = None) -> int:
        return len(text.split())


class FakeClock:
    """Returns scripted readings in order, repeating the last one."""

    def __init__(self, *readings: float) -> None:
        self._readings = list(readings) or [0.0]
        self.calls = 0

    def __call__(self) -> float:
        idx = min(self.calls, len(self._readings) - 1)
        self.calls += 1
        return self._readings[idx]


def chat_body(text: str = "hello") -> dict:
    return {"messages": [{"role": "user", "content": text}]}
