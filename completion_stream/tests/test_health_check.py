from __future__ import annotations

import pytest

from completion_stream.base.errors import ErrorCode, ProviderConnectionError, ProviderResponseError
from completion_stream.base.health import check_endpoint
from completion_stream.base.http.pool import ProviderClientPool


@pytest.mark.asyncio
async def test_lists_models(fake_provider):
    fake_provider.models = ["a", "b"]
    pool = ProviderClientPool(2, client_factory=fake_provider)
    assert await check_endpoint(pool, "http://h/v1", "k") == ["a", "b"]  # nosec B101
    assert await check_endpoint(pool, "http://h/v1", "k", "b") == ["a", "b"]  # nosec B101
    assert len(fake_provider.clients) == 1  # nosec B101


@pytest.mark.asyncio
async def test_missing_model_is_not_found(fake_provider):
    pool = ProviderClientPool(2, client_factory=fake_provider)
    with pytest.raises(ProviderResponseError) as excinfo:
        await check_endpoint(pool, "http://h/v1", "k", "absent")
    assert excinfo.value.code is ErrorCode.NOT_FOUND  # nosec B101


@pytest.mark.asyncio
async def test_unreachable_endpoint_raises_connection_error(fake_provider, log_capture):
    fake_provider.models = ConnectionRefusedError(111, "Connection refused")
    pool = ProviderClientPool(2, client_factory=fake_provider)
    with pytest.raises(ProviderConnectionError) as excinfo:
        await check_endpoint(pool, "http://h/v1", "k")
    assert excinfo.value.code is ErrorCode.CONNECTION_REFUSED  # nosec B101
    assert log_capture.named("health.error")[0]["error_code"] == "connection_refused"  # nosec B101
