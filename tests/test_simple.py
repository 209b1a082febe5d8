"""
Simple test cases to verify test configuration.
"""
import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

@pytest.mark.asyncio
async def test_app_exists(client: AsyncClient):
    """Test that app exists and serves its OpenAPI schema."""
    response = await client.get("/openapi.json")
    assert response.status_code == 200
    assert "/api/auth/login" in response.json()["paths"]

@pytest.mark.asyncio
async def test_database_session(async_session: AsyncSession):
    """Test that database session works."""
    assert async_session is not None
    # Run a simple query
    from sqlalchemy import text
    result = await async_session.execute(text("SELECT 1"))
    assert result.scalar() == 1

@pytest.mark.asyncio
async def test_trace_id_header_is_echoed(client: AsyncClient):
    """Logging middleware propagates the caller's trace id."""
    response = await client.get("/openapi.json", headers={"X-Trace-ID": "trace-123"})
    assert response.headers["X-Trace-ID"] == "trace-123"

@pytest.mark.asyncio
async def test_service_logs_carry_request_trace_id(anon_client: AsyncClient):
    """Module-level service loggers pick up the trace id of the request being handled."""
    from loguru import logger

    records = []
    sink_id = logger.add(lambda message: records.append(dict(message.record["extra"])), level="INFO")
    try:
        response = await anon_client.post(
            "/api/auth/register",
            json={"username": "tracy", "email": "tracy@example.com", "password": "Secret123"},
            headers={"X-Trace-ID": "trace-456"},
        )
    finally:
        logger.remove(sink_id)

    assert response.status_code == 200
    service_records = [extra for extra in records if extra.get("name") == "auth_service"]
    assert service_records
    assert {extra["trace_id"] for extra in service_records} == {"trace-456"}

def test_logs_outside_a_request_use_system_trace_id():
    from loguru import logger
    from framework.logging.logger import get_logger

    records = []
    sink_id = logger.add(lambda message: records.append(dict(message.record["extra"])), level="INFO")
    try:
        get_logger("startup").info("outside any request")
    finally:
        logger.remove(sink_id)

    assert records == [{"trace_id": "system", "name": "startup"}]
