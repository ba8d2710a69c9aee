"""Tests for logging_utils processors and request context binding."""

from __future__ import annotations

import os
from typing import Any
from uuid import uuid4

from structlog.contextvars import clear_contextvars, get_contextvars

from services.libs.warranty_service_libs.logging_utils import (
    add_service_context,
    bind_request_context,
    create_service_logger,
)


class TestAddServiceContext:
    """Tests for the add_service_context processor."""

    def test_adds_service_fields_from_env(self) -> None:
        # Arrange
        os.environ["SERVICE_NAME"] = "warranty_bff_service"
        os.environ["ENVIRONMENT"] = "staging"
        event_dict: dict[str, Any] = {"event": "test message", "level": "info"}

        # Act
        result = add_service_context(None, "", event_dict)

        # Assert
        assert result["service.name"] == "warranty_bff_service"
        assert result["deployment.environment"] == "staging"
        assert result["event"] == "test message"
        assert result["level"] == "info"


class TestBindRequestContext:
    def teardown_method(self) -> None:
        clear_contextvars()

    def test_binds_correlation_id_and_extra_fields(self) -> None:
        correlation_id = uuid4()

        bind_request_context(correlation_id, path="/bff/v1/admin/batches", method="GET")

        context = get_contextvars()
        assert context["correlation_id"] == str(correlation_id)
        assert context["path"] == "/bff/v1/admin/batches"
        assert context["method"] == "GET"

    def test_replaces_previous_request_context(self) -> None:
        bind_request_context(uuid4(), path="/old")

        bind_request_context("abc-123")

        context = get_contextvars()
        assert context == {"correlation_id": "abc-123"}


def test_create_service_logger_binds_name() -> None:
    logger = create_service_logger("backend_client")

    assert logger is not None
    assert hasattr(logger, "info")
