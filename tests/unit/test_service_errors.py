from __future__ import annotations

from src.services.errors import (
    ServiceError,
    UpstreamError,
    UpstreamRequestError,
    UpstreamStatusError,
    UpstreamTimeoutError,
)

URL = "https://www.themealdb.com/api/json/v1/1/search.php"


class TestServiceError:
    def test_base_exception(self) -> None:
        error = ServiceError("Base service error")
        assert str(error) == "Base service error"
        assert isinstance(error, Exception)


class TestUpstreamStatusError:
    def test_includes_status_and_url(self) -> None:
        error = UpstreamStatusError(URL, 503)
        assert "503" in str(error)
        assert URL in str(error)
        assert error.status_code == 503

    def test_custom_reason(self) -> None:
        error = UpstreamStatusError(URL, 200, "Upstream returned invalid JSON")
        assert "invalid JSON" in str(error)
        assert error.reason == "Upstream returned invalid JSON"


class TestUpstreamTimeoutError:
    def test_includes_timeout(self) -> None:
        error = UpstreamTimeoutError(URL, 15.0)
        assert "15.0" in str(error)
        assert error.timeout_seconds == 15.0


class TestUpstreamRequestError:
    def test_includes_reason(self) -> None:
        error = UpstreamRequestError(URL, "Invalid URL")
        assert "Invalid URL" in str(error)
        assert error.url == URL


class TestExceptionHierarchy:
    def test_upstream_errors_inherit_from_upstream_error(self) -> None:
        assert issubclass(UpstreamStatusError, UpstreamError)
        assert issubclass(UpstreamTimeoutError, UpstreamError)
        assert issubclass(UpstreamRequestError, UpstreamError)

    def test_upstream_error_is_service_error(self) -> None:
        assert issubclass(UpstreamError, ServiceError)
