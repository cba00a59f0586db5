# ============================================================================
# STRUCTURED LOGGING TESTS
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Tests - Request context and formatters
# PURPOSE: Verify log_context isolation, JSON output and checkpoints
# CREATED: 18 OCT 2026
# ============================================================================
"""
Structured Logging Tests

Run with:
    pytest tests/test_logging.py -v
"""

import asyncio
import json
import logging

from core.logging import (
    HumanFormatter,
    StructuredFormatter,
    get_current_context,
    log_checkpoint,
    log_context,
)


def _record(message="hello"):
    return logging.LogRecord("tests", logging.INFO, __file__, 1, message, None, None)


class TestLogContext:
    """ContextVar-backed request context."""

    def test_nested_context_merges_and_resets(self):
        with log_context(request_id="req-1"):
            with log_context(platform_url="https://p/versions"):
                inner = get_current_context()
                assert inner.request_id == "req-1"
                assert inner.platform_url == "https://p/versions"
            assert get_current_context().platform_url is None

        assert get_current_context().request_id is None

    def test_concurrent_tasks_do_not_share_context(self):
        async def handle(request_id):
            with log_context(request_id=request_id):
                await asyncio.sleep(0)
                return get_current_context().request_id

        async def run():
            return await asyncio.gather(handle("req-a"), handle("req-b"))

        assert asyncio.run(run()) == ["req-a", "req-b"]


class TestFormatters:
    """JSON and human formatters include the request context."""

    def test_structured_formatter(self):
        with log_context(request_id="req-1", operation="credentials.post"):
            output = json.loads(StructuredFormatter().format(_record()))

        assert output["message"] == "hello"
        assert output["level"] == "INFO"
        assert output["context"] == {"request_id": "req-1", "operation": "credentials.post"}

    def test_human_formatter(self):
        with log_context(request_id="req-1", platform_url="https://p/versions"):
            output = HumanFormatter().format(_record())

        assert "req=req-1" in output
        assert "platform=https://p/versions" in output
        assert output.endswith("hello")


class TestCheckpoint:
    """log_checkpoint() markers."""

    def test_checkpoint_record(self, caplog):
        caplog.set_level(logging.INFO, logger="checkpoint")

        with log_context(request_id="req-1", platform_url="https://p/versions"):
            log_checkpoint("registration_completed", {"side": "receiver"})

        record = caplog.records[-1]
        assert record.getMessage() == "CHECKPOINT: registration_completed"
        assert record.extra["checkpoint"] == "registration_completed"
        assert record.extra["platform_url"] == "https://p/versions"
        assert record.extra["data"] == {"side": "receiver"}
