import io
import logging

import pytest

from libs.common.logging import CorrelationIdFilter, LOG_FORMAT, set_correlation_id


@pytest.fixture
def captured():
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    log = logging.getLogger("tests.correlation")
    log.addHandler(handler)
    log.setLevel(logging.INFO)
    yield log, stream
    log.removeHandler(handler)
    set_correlation_id(None)


def test_records_carry_the_current_correlation_id(captured):
    log, stream = captured

    set_correlation_id("req-42")
    log.info("inside request")
    set_correlation_id(None)
    log.info("background work")

    lines = stream.getvalue().splitlines()
    assert "| req-42 | inside request" in lines[0]
    assert "| - | background work" in lines[1]


@pytest.mark.asyncio
async def test_middleware_echoes_correlation_header(client):
    response = await client.get("/admin/products", headers={"X-Correlation-Id": "abc-123"})
    generated = await client.get("/admin/products")

    assert response.headers["X-Correlation-Id"] == "abc-123"
    assert generated.headers["X-Correlation-Id"]
