"""Streaming completion engine.

Purpose:
    Issue one streaming chat completion against an OpenAI-compatible
    provider, accumulate the ``content`` and ``reasoning_content`` channels
    under independent size ceilings, and turn the raw text into a
    :class:`CompletionResult` with timing metadata.

Lifecycle of :meth:`StreamingCompletionEngine.complete`:
    1. allocate a request id unique among in-flight requests
    2. validate provider config and request body
    3. obtain the pooled client and open the stream
    4. consume chunks (cancellation is polled before each one)
    5. on a ceiling breach, clip, append the truncation notice and abort
    6. count output tokens, split reasoning, decode structured output
    7. close the stream and release buffers in ``finally``

Failure semantics:
    ``complete`` never raises for provider, transport, decoding or
    configuration problems; they come back as ``CompletionResult.failure``.
    A read error after content arrived is logged and the partial content is
    finalized as a normal result.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Mapping, Optional, Set

from ..cancellation import CancellationToken
from ..decoding import (
    DEFAULT_REASONING_TAGS,
    ReasoningTags,
    decode_structured,
    split_reasoning,
)
from ..errors import (
    CompletionError,
    ConfigurationError,
    EmptyResponseError,
    StreamCancelledError,
    TruncationWarning,
    to_completion_error,
)
from ..http.pool import ProviderClientPool
from ..logging import LogContext, get_logger, normalized_log_event
from ..models import CompletionResult, ProviderConfig
from ..tokens import TokenCounter
from .engine_helpers import build_create_params, close_stream, extract_delta, new_request_id, validate_body
from .stream_state import ChannelBuffer, StreamState
from .streaming_metrics import compute_metrics

DEFAULT_CEILINGS: Dict[str, int] = {
    "chat": 75_000,
    "tool": 50_000,
    "summary": 25_000,
    "reasoning": 75_000,
}


class StreamingCompletionEngine:
    """Runs streamed completions over pooled provider clients."""

    def __init__(
        self,
        pool: ProviderClientPool,
        *,
        ceilings: Optional[Mapping[str, int]] = None,
        token_counter: Optional[TokenCounter] = None,
        reasoning_tags: ReasoningTags = DEFAULT_REASONING_TAGS,
        structured_field: str = "final_response",
        diagnostic_prefix_chars: int = 200,
        logger: Optional[logging.Logger] = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.pool = pool
        self.ceilings: Dict[str, int] = {**DEFAULT_CEILINGS, **(ceilings or {})}
        self.token_counter = token_counter or TokenCounter()
        self.reasoning_tags = reasoning_tags
        self.structured_field = structured_field
        self.diagnostic_prefix_chars = diagnostic_prefix_chars
        self._logger = logger or get_logger("engine")
        self._clock = clock
        self._in_flight: Set[str] = set()

    @property
    def in_flight(self) -> Set[str]:
        return set(self._in_flight)

    def ceiling_for(self, mode: str) -> int:
        return self.ceilings.get(mode, self.ceilings["chat"])

    async def complete(
        self,
        request_body: Mapping[str, Any],
        provider_config: Optional[ProviderConfig],
        *,
        mode: str = "chat",
        structured: bool = False,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> CompletionResult:
        """Run one streamed completion and return its result (never raises)."""
        request_id = new_request_id(self._in_flight)
        self._in_flight.add(request_id)
        has_config = isinstance(provider_config, ProviderConfig)
        ctx = LogContext(
            endpoint=provider_config.endpoint if has_config else None,
            model=(request_body or {}).get("model") if isinstance(request_body, Mapping) else None,
            mode=mode,
            request_id=request_id,
        )
        if has_config:
            ctx.model = ctx.model or provider_config.model
        try:
            if not has_config:
                raise ConfigurationError(
                    f"Provider configuration is required, got {type(provider_config).__name__}",
                    request_id=request_id,
                    model=ctx.model,
                )
            return await self._run(request_id, request_body, provider_config, ctx, mode, structured, cancellation_token)
        except Exception as exc:  # noqa: BLE001 - every failure becomes a result
            error = to_completion_error(exc, request_id=request_id, endpoint=ctx.endpoint, model=ctx.model)
            self._log_error(ctx, error)
            return CompletionResult.failure(request_id, error)
        finally:
            self._in_flight.discard(request_id)

    async def _run(
        self,
        request_id: str,
        body: Mapping[str, Any],
        config: ProviderConfig,
        ctx: LogContext,
        mode: str,
        structured: bool,
        token: Optional[CancellationToken],
    ) -> CompletionResult:
        missing = config.missing_fields()
        if missing:
            raise ConfigurationError(
                f"Provider configuration missing: {', '.join(missing)}",
                request_id=request_id,
                endpoint=config.endpoint,
                model=config.model,
            )
        validate_body(body, request_id)
        self._check_cancelled(token, ctx, config)

        state = StreamState(
            content=ChannelBuffer("content", self.ceiling_for(mode)),
            reasoning=ChannelBuffer("reasoning", self.ceilings["reasoning"]),
            start_time=self._clock(),
        )
        stream = None
        try:
            pooled = await self.pool.get(config.endpoint, config.api_key)
            params = build_create_params(body, config)
            normalized_log_event(self._logger, "completion.open", ctx, phase="start", attempt=1, emitted=False)
            stream = await pooled.client.chat.completions.create(**params)
            await self._consume(stream, state, ctx, config, token)
            state.end_time = self._clock()
            return await self._finalize(request_id, state, ctx, config, structured)
        finally:
            await close_stream(stream, self._logger)
            state.release()

    async def _consume(
        self,
        stream: Any,
        state: StreamState,
        ctx: LogContext,
        config: ProviderConfig,
        token: Optional[CancellationToken],
    ) -> None:
        try:
            async for chunk in stream:
                self._check_cancelled(token, ctx, config)
                state.chunks += 1
                content, reasoning = extract_delta(chunk)
                if state.first_token_at is None and (content or reasoning):
                    state.first_token_at = self._clock()
                    normalized_log_event(
                        self._logger,
                        "completion.first_token",
                        ctx,
                        phase="first_token",
                        emitted=True,
                        time_to_first_token_ms=round((state.first_token_at - state.start_time) * 1000, 3),
                    )
                if content and not state.content.append(content):
                    self._mark_truncated(state, state.content, ctx)
                if reasoning and not state.reasoning.append(reasoning):
                    self._mark_truncated(state, state.reasoning, ctx)
                if state.truncated:
                    break
        except CompletionError:
            raise
        except Exception as exc:  # noqa: BLE001 - partial content survives read errors
            if state.empty:
                raise
            normalized_log_event(
                self._logger,
                "completion.partial",
                ctx,
                phase="mid_stream",
                emitted=True,
                level=logging.WARNING,
                error=str(exc)[:200],
                chars=state.content.length,
            )

    @staticmethod
    def _check_cancelled(token: Optional[CancellationToken], ctx: LogContext, config: ProviderConfig) -> None:
        if token is not None and token.cancelled:
            raise StreamCancelledError(
                f"Stream cancelled: {token.reason or 'cancelled by caller'}",
                request_id=ctx.request_id,
                endpoint=config.endpoint,
                model=ctx.model,
            )

    def _mark_truncated(self, state: StreamState, buffer: ChannelBuffer, ctx: LogContext) -> None:
        state.truncated_channels.append(buffer.name)
        normalized_log_event(
            self._logger,
            "completion.truncated",
            ctx,
            phase="mid_stream",
            emitted=True,
            level=logging.WARNING,
            channel=buffer.name,
            ceiling=buffer.ceiling,
        )

    async def _finalize(
        self,
        request_id: str,
        state: StreamState,
        ctx: LogContext,
        config: ProviderConfig,
        structured: bool,
    ) -> CompletionResult:
        if state.empty:
            raise EmptyResponseError(
                "Provider stream ended without producing any content",
                request_id=request_id,
                endpoint=config.endpoint,
                model=ctx.model,
            )
        content_text = state.content.text
        reasoning_channel = state.reasoning.text
        output_tokens = await self.token_counter.count(
            state.content.generated + state.reasoning.generated, config.model_type
        )
        metrics = compute_metrics(state, state.end_time or self._clock(), output_tokens)

        split = split_reasoning(content_text, self.reasoning_tags)
        reasoning_parts = [p for p in (reasoning_channel.strip(), split.reasoning) if p]
        final_text = split.final

        structured_data = None
        strategy = None
        if structured:
            decoded = decode_structured(
                final_text, field=self.structured_field, prefix_limit=self.diagnostic_prefix_chars
            )
            structured_data, strategy = decoded.data, decoded.strategy
            final_text = decoded.final_response or final_text

        warnings = tuple(
            TruncationWarning(buf.name, buf.ceiling)
            for buf in (state.content, state.reasoning)
            if buf.name in state.truncated_channels
        )
        normalized_log_event(
            self._logger,
            "completion.end",
            ctx,
            phase="finalize",
            emitted=True,
            tokens=output_tokens,
            total_duration_ms=metrics.total_duration_ms,
            time_to_first_token_ms=metrics.time_to_first_token_ms,
            tokens_per_second=metrics.tokens_per_second,
            truncated=state.truncated,
            structured_strategy=strategy,
        )
        return CompletionResult(
            request_id=request_id,
            final_text=final_text,
            reasoning_text="\n".join(reasoning_parts),
            time_to_first_token_ms=metrics.time_to_first_token_ms,
            tokens_per_second=metrics.tokens_per_second,
            output_tokens=output_tokens,
            total_duration_ms=metrics.total_duration_ms,
            truncated=state.truncated,
            structured=structured_data,
            structured_strategy=strategy,
            warnings=warnings,
        )

    def _log_error(self, ctx: LogContext, error: CompletionError) -> None:
        normalized_log_event(
            self._logger,
            "completion.error",
            ctx,
            phase="finalize",
            emitted=False,
            error_code=error.code.value,
            level=logging.ERROR,
            error_type=type(error).__name__,
            error=error.message[:260],
        )


__all__ = ["StreamingCompletionEngine", "DEFAULT_CEILINGS"]
