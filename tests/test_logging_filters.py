"""Tests for log redaction and JSON formatting."""

from __future__ import annotations

import json
import logging
from io import StringIO

from ratekeeper.core.logging import (
    JsonFormatter,
    SensitiveDataFilter,
    clear_request_id,
    set_request_id,
)


def _capture(name: str) -> tuple[logging.Logger, StringIO]:
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    return logger, stream


def test_client_key_is_redacted_but_hash_is_kept():
    logger, stream = _capture("test_client_key_redaction")

    logger.warning(
        "rate_limit.exceeded",
        extra={"client_key": "client-secret-1", "key_hash": "abc123", "algorithm": "token_bucket"},
    )

    record = json.loads(stream.getvalue())
    assert record["client_key"] == "[REDACTED]"
    assert record["key_hash"] == "abc123"
    assert record["algorithm"] == "token_bucket"
    assert record["level"] == "warning"
    assert record["message"] == "rate_limit.exceeded"


def test_nested_headers_are_redacted():
    logger, stream = _capture("test_nested_redaction")

    logger.info(
        "request",
        extra={"headers": {"X-Client-Key": "client-secret-2", "user-agent": "pytest"}},
    )

    output = stream.getvalue()
    assert "client-secret-2" not in output
    assert "pytest" in output


def test_request_id_from_context_is_included():
    logger, stream = _capture("test_request_id_context")

    set_request_id("req-42")
    try:
        logger.info("rate_limit.allowed")
    finally:
        clear_request_id()

    assert json.loads(stream.getvalue())["request_id"] == "req-42"
