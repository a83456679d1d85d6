"""Unit tests for errors, logging setup and the bounded gather helper."""

from __future__ import annotations

import asyncio
import io
import json

import pytest
import structlog

from outline_rag.utils.concurrency import throttled_gather
from outline_rag.utils.errors import (
    ConfigurationError,
    DocumentSourceError,
    LLMError,
    OutlineRAGError,
    RAGError,
    RateLimitError,
    WorkflowError,
)
from outline_rag.utils.logging import configure_logging, get_logger


class TestErrors:
    @pytest.mark.parametrize(
        "error_cls",
        [ConfigurationError, LLMError, RAGError, DocumentSourceError, RateLimitError, WorkflowError],
    )
    def test_hierarchy(self, error_cls) -> None:
        assert issubclass(error_cls, OutlineRAGError)

    def test_rate_limit_is_document_source_error(self) -> None:
        assert issubclass(RateLimitError, DocumentSourceError)

    def test_str_with_provider(self) -> None:
        err = LLMError(message="Rate limit exceeded", provider_name="groq")
        assert str(err) == "[groq] Rate limit exceeded"
        assert err.message == "Rate limit exceeded"
        assert err.provider_name == "groq"

    def test_str_without_provider(self) -> None:
        assert str(WorkflowError(message="Question is required")) == "Question is required"

    def test_default_messages(self) -> None:
        assert str(RateLimitError()) == "Rate limit exceeded"
        assert str(ConfigurationError()) == "Invalid or missing configuration"


class TestLogging:
    def test_json_output_goes_to_given_stream(self) -> None:
        stream = io.StringIO()
        configure_logging(log_level="INFO", json_output=True, stream=stream)
        try:
            structlog.get_logger(logger_name="test").info("document_chunked", propositions=3)
            line = stream.getvalue().strip().splitlines()[-1]
            payload = json.loads(line)
            assert payload["event"] == "document_chunked"
            assert payload["propositions"] == 3
            assert payload["level"] == "info"
        finally:
            structlog.reset_defaults()

    def test_level_filtering(self) -> None:
        stream = io.StringIO()
        configure_logging(log_level="WARNING", json_output=True, stream=stream)
        try:
            structlog.get_logger().info("hidden_event")
            structlog.get_logger().warning("visible_event")
            output = stream.getvalue()
            assert "hidden_event" not in output
            assert "visible_event" in output
        finally:
            structlog.reset_defaults()

    def test_module_logger_outlives_a_closed_stream(self) -> None:
        from outline_rag.services.chunking import extractor

        stream = io.StringIO()
        configure_logging(log_level="INFO", json_output=True, stream=stream)
        extractor.logger.warning("first_event")
        assert "first_event" in stream.getvalue()

        stream.close()
        structlog.reset_defaults()
        extractor.logger.warning("second_event")

    def test_get_logger_returns_usable_logger(self) -> None:
        logger = get_logger(__name__)
        assert hasattr(logger, "info")


class TestThrottledGather:
    @pytest.mark.asyncio
    async def test_results_keep_input_order(self) -> None:
        async def delayed(value: int, delay: float) -> int:
            await asyncio.sleep(delay)
            return value

        results = await throttled_gather(
            [delayed(1, 0.03), delayed(2, 0.0), delayed(3, 0.01)],
            semaphore=asyncio.Semaphore(3),
        )
        assert results == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self) -> None:
        running = 0
        peak = 0

        async def work() -> None:
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1

        await throttled_gather([work() for _ in range(10)], semaphore=asyncio.Semaphore(3))
        assert peak == 3

    @pytest.mark.asyncio
    async def test_exceptions_are_returned(self) -> None:
        async def ok() -> str:
            return "ok"

        async def boom() -> str:
            raise ValueError("boom")

        results = await throttled_gather([ok(), boom(), ok()], semaphore=asyncio.Semaphore(2))
        assert results[0] == "ok"
        assert isinstance(results[1], ValueError)
        assert results[2] == "ok"
