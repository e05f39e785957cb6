"""Tests for the tenancy middleware and route dependencies."""

from __future__ import annotations

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from support import RecordingOverride, make_settings

from grove.core import Grove
from grove.hooks import ResolutionHook
from grove.http.deps import get_tenancy, require_tenant
from grove.tenancy import Tenancy
from grove.tenants import Tenant


def make_app(grove: Grove, **install_options) -> FastAPI:
    app = FastAPI(lifespan=grove.lifespan)
    grove.install(app, **install_options)

    @app.get("/orders")
    async def list_orders(tenancy: Tenancy = Depends(get_tenancy())) -> dict:
        return {"tenant": tenancy.identifier()}

    @app.get("/invoices")
    async def list_invoices(tenant: Tenant = Depends(require_tenant())) -> dict:
        return {"tenant": tenant.tenant_identifier}

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    return app


class TestTenancyMiddleware:
    """Tests for TenancyMiddleware."""

    def test_resolves_tenant_from_subdomain(self, grove: Grove) -> None:
        client = TestClient(make_app(grove), base_url="http://acme.example.com")

        response = client.get("/orders")

        assert response.status_code == 200
        assert response.json() == {"tenant": "acme"}

    def test_unresolved_tenant_is_allowed_by_default(self, grove: Grove) -> None:
        client = TestClient(make_app(grove), base_url="http://initech.example.com")

        response = client.get("/orders")

        assert response.status_code == 200
        assert response.json() == {"tenant": None}

    def test_returns_404_when_tenant_required(self, grove: Grove) -> None:
        client = TestClient(
            make_app(grove, require_tenant=True), base_url="http://initech.example.com"
        )

        response = client.get("/orders")

        assert response.status_code == 404
        assert response.json() == {"error": "Tenant not found"}

    def test_health_endpoint_excluded_by_default(self, grove: Grove) -> None:
        client = TestClient(make_app(grove, require_tenant=True), base_url="http://example.com")

        response = client.get("/health")

        assert response.status_code == 200

    def test_custom_excluded_paths(self, grove: Grove) -> None:
        client = TestClient(
            make_app(grove, require_tenant=True, excluded_paths=["/orders"]),
            base_url="http://acme.example.com",
        )

        response = client.get("/orders")

        assert response.status_code == 200
        assert response.json() == {"tenant": None}

    def test_tenant_forgotten_after_request(self, grove: Grove) -> None:
        """Overrides are applied for the request and cleaned up after it."""
        calls: list[tuple[str, ...]] = []
        grove.register_override("db", RecordingOverride("db", calls))
        client = TestClient(make_app(grove), base_url="http://acme.example.com")

        client.get("/orders")

        assert calls == [
            ("apply", "db", "tenants", "acme"),
            ("cleanup", "db", "tenants", "acme"),
        ]

    def test_requests_do_not_leak_tenants(self, grove: Grove) -> None:
        app = make_app(grove)
        acme = TestClient(app, base_url="http://acme.example.com")
        plain = TestClient(app, base_url="http://example.com")

        assert acme.get("/orders").json() == {"tenant": "acme"}
        assert plain.get("/orders").json() == {"tenant": None}

    def test_lifespan_boots_overrides(self, grove: Grove) -> None:
        calls: list[tuple[str, ...]] = []
        grove.register_override("db", RecordingOverride("db", calls))

        with TestClient(make_app(grove), base_url="http://example.com"):
            assert grove.has_booted_overrides()

        assert calls == [("boot", "db")]


class TestRequireTenant:
    """Tests for the require_tenant dependency."""

    def test_returns_current_tenant(self, grove: Grove) -> None:
        client = TestClient(make_app(grove), base_url="http://globex.example.com")

        response = client.get("/invoices")

        assert response.status_code == 200
        assert response.json() == {"tenant": "globex"}

    def test_missing_tenant_is_404(self, grove: Grove) -> None:
        client = TestClient(make_app(grove), base_url="http://example.com")

        response = client.get("/invoices")

        assert response.status_code == 404
        assert response.json()["detail"] == "No tenant found for tenancy tenants"

    def test_retries_with_middleware_hook(self) -> None:
        """A tenant resolved by the dependency is cleaned up at request end."""
        grove = Grove(
            make_settings(
                resolvers={"header": {"driver": "header", "hooks": ["middleware"]}},
                hooks=[ResolutionHook.ROUTING, ResolutionHook.MIDDLEWARE],
            )
        )
        calls: list[tuple[str, ...]] = []
        grove.register_override("db", RecordingOverride("db", calls))
        client = TestClient(make_app(grove), base_url="http://example.com")

        response = client.get("/invoices", headers={"Tenants-Identifier": "x"})

        assert response.status_code == 200
        assert response.json() == {"tenant": "x"}
        assert calls == [
            ("apply", "db", "tenants", "x"),
            ("cleanup", "db", "tenants", "x"),
        ]

    def test_tenant_loaded_by_handler_is_cleaned_up(self, grove: Grove) -> None:
        calls: list[tuple[str, ...]] = []
        grove.register_override("db", RecordingOverride("db", calls))
        app = make_app(grove)

        @app.post("/tenants/{key}/sync")
        async def sync_tenant(key: int) -> dict:
            await grove.tenancy().load(key)
            return {"tenant": grove.tenancy().identifier()}

        client = TestClient(app, base_url="http://example.com")

        response = client.post("/tenants/2/sync")

        assert response.json() == {"tenant": "globex"}
        assert calls == [
            ("apply", "db", "tenants", "globex"),
            ("cleanup", "db", "tenants", "globex"),
        ]

    def test_grove_must_be_installed(self) -> None:
        app = FastAPI()

        @app.get("/invoices")
        async def list_invoices(tenant: Tenant = Depends(require_tenant())) -> dict:
            return {"tenant": tenant.tenant_identifier}

        client = TestClient(app)

        with pytest.raises(RuntimeError, match="Grove is not installed"):
            client.get("/invoices")
