import structlog

from storefront.utils.logging import bind_request, build_processors, get_log_level, unbind_request


class TestLogLevel:
    def test_defaults_per_environment(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        assert get_log_level("production") == "INFO"
        assert get_log_level("development") == "DEBUG"
        assert get_log_level("test") == "WARNING"
        assert get_log_level("somewhere-else") == "INFO"

    def test_log_level_variable_wins(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "error")
        assert get_log_level("development") == "ERROR"


class TestProcessors:
    def test_production_renders_json(self):
        assert isinstance(build_processors("production")[-1], structlog.processors.JSONRenderer)

    def test_development_renders_to_console(self):
        assert isinstance(build_processors("development")[-1], structlog.dev.ConsoleRenderer)


class TestRequestScope:
    def test_bind_request_sets_context(self):
        request_id = bind_request("POST", "/orders", "req-123")
        try:
            assert request_id == "req-123"
            context = structlog.contextvars.get_contextvars()
            assert context == {"request_id": "req-123", "method": "POST", "path": "/orders"}
        finally:
            unbind_request()
        assert structlog.contextvars.get_contextvars() == {}

    def test_request_id_is_generated_when_missing(self):
        try:
            assert len(bind_request("GET", "/products")) == 32
        finally:
            unbind_request()
