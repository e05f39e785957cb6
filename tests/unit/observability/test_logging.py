"""Tests for structured logging."""

import json
import logging
import sys

import pytest

from grove.observability.logging import (
    ConsoleFormatter,
    JsonFormatter,
    LogContext,
    configure_logging,
    request_id_var,
    tenancy_var,
    tenant_var,
)


def make_record(message: str = "Tenant changed", **extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="grove.tenancy",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def test_basic_fields(self) -> None:
        output = json.loads(JsonFormatter().format(make_record()))

        assert output["level"] == "INFO"
        assert output["logger"] == "grove.tenancy"
        assert output["message"] == "Tenant changed"
        assert "tenant" not in output

    def test_includes_tenant_context(self) -> None:
        with LogContext(request_id="req-1", tenancy="tenants", tenant="acme"):
            output = json.loads(JsonFormatter().format(make_record()))

        assert output["request_id"] == "req-1"
        assert output["tenancy"] == "tenants"
        assert output["tenant"] == "acme"

    def test_extra_fields(self) -> None:
        output = json.loads(JsonFormatter().format(make_record(job_id="abc", obj=object())))

        assert output["job_id"] == "abc"
        assert isinstance(output["obj"], str)

    def test_exception_info(self) -> None:
        try:
            raise ValueError("boom")
        except ValueError:
            record = make_record()
            record.exc_info = sys.exc_info()

        output = json.loads(JsonFormatter().format(record))

        assert output["exception"]["type"] == "ValueError"
        assert output["exception"]["message"] == "boom"


class TestConsoleFormatter:
    def test_includes_tenant(self) -> None:
        formatter = ConsoleFormatter(use_colors=False)

        with LogContext(tenancy="tenants", tenant="acme"):
            output = formatter.format(make_record())

        assert "grove.tenancy" in output
        assert "tenant=tenants:acme" in output


class TestLogContext:
    def test_restores_previous_values(self) -> None:
        with LogContext(tenant="acme"):
            with LogContext(tenant="globex"):
                assert tenant_var.get() == "globex"
            assert tenant_var.get() == "acme"

        assert tenant_var.get() == ""
        assert tenancy_var.get() == ""
        assert request_id_var.get() == ""

    def test_ignores_unknown_keys(self) -> None:
        with LogContext(color="red"):
            assert tenant_var.get() == ""


class TestConfigureLogging:
    @pytest.fixture(autouse=True)
    def restore_root(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_json_handler(self) -> None:
        configure_logging(json_format=True, level="DEBUG")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)

    def test_console_handler(self) -> None:
        configure_logging(json_format=False, level="warning")

        assert isinstance(logging.getLogger().handlers[0].formatter, ConsoleFormatter)
