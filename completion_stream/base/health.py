"""Endpoint health check.

Lists the provider's models through the pooled client. When a model name is
given it must appear in the listing. Failures raise the same error types the
engine reports, so callers handle both paths alike.
"""
from __future__ import annotations

from typing import Any, List, Optional

from .errors import ErrorCode, ProviderResponseError, to_completion_error
from .http.pool import ProviderClientPool
from .logging import LogContext, get_logger, normalized_log_event

_logger = get_logger("health")


def _model_ids(resp: Any) -> List[str]:
    data = resp.get("data", []) if isinstance(resp, dict) else getattr(resp, "data", None)
    ids: List[str] = []
    for item in data or []:
        mid = item.get("id") if isinstance(item, dict) else getattr(item, "id", None)
        if isinstance(mid, str):
            ids.append(mid)
    return ids


async def check_endpoint(
    pool: ProviderClientPool,
    endpoint: str,
    api_key: str,
    model: Optional[str] = None,
) -> List[str]:
    """Return the model ids served by ``endpoint``.

    Raises:
        ProviderResponseError: HTTP failure, or ``model`` is not listed.
        ProviderConnectionError: the endpoint could not be reached.
    """
    ctx = LogContext(endpoint=endpoint, model=model)
    try:
        pooled = await pool.get(endpoint, api_key)
        resp = await pooled.client.models.list()
    except Exception as exc:  # noqa: BLE001 - converted and re-raised
        error = to_completion_error(exc, endpoint=endpoint, model=model)
        normalized_log_event(
            _logger, "health.error", ctx, phase="health", emitted=False, error_code=error.code.value
        )
        raise error from exc
    ids = _model_ids(resp)
    if model and model not in ids:
        raise ProviderResponseError(
            f"Model {model} not found in the list of available models.",
            code=ErrorCode.NOT_FOUND,
            endpoint=endpoint,
            model=model,
        )
    normalized_log_event(_logger, "health.ok", ctx, phase="health", emitted=True, models=len(ids))
    return ids


__all__ = ["check_endpoint"]
