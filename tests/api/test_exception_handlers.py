"""Tests for the FastAPI exception handlers."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from neo_tenancy.api import register_exception_handlers
from neo_tenancy.core.exceptions import (
    PermissionDeniedError,
    StoreTimeoutError,
    TenantNotFoundError,
    TenantProvisioningError,
)


def _build_app(**kwargs):
    app = FastAPI()
    register_exception_handlers(app, **kwargs)
    
    @app.get("/missing")
    async def missing():
        raise TenantNotFoundError("Tenant cmp_1 not found", details={"tenant_id": "cmp_1"})
    
    @app.get("/denied")
    async def denied():
        raise PermissionDeniedError("Permission 'hr.payroll.view' denied")
    
    @app.get("/slow")
    async def slow():
        raise StoreTimeoutError("Store call 'create role' timed out")
    
    @app.get("/provision")
    async def provision():
        raise TenantProvisioningError("Tenant creation failed", details={"tenant_id": "cmp_1"})
    
    @app.get("/crash")
    async def crash():
        raise RuntimeError("secret internals")
    
    return app


@pytest.fixture
def client():
    return TestClient(_build_app(), raise_server_exceptions=False)


class TestExceptionHandlers:
    """Test status codes and bodies of handled errors."""
    
    def test_not_found(self, client):
        response = client.get("/missing")
        
        assert response.status_code == 404
        assert response.json()["error"] == {
            "code": "TenantNotFoundError",
            "message": "Tenant cmp_1 not found",
            "details": {"tenant_id": "cmp_1"},
            "type": "TenantNotFoundError",
        }
    
    def test_denied(self, client):
        assert client.get("/denied").status_code == 403
    
    def test_timeout(self, client):
        assert client.get("/slow").status_code == 504
    
    def test_provisioning_failure(self, client):
        response = client.get("/provision")
        
        assert response.status_code == 500
        assert response.json()["error"]["details"]["rollback_succeeded"] is True
    
    def test_unexpected_error_is_hidden_in_production(self, client):
        response = client.get("/crash")
        
        assert response.status_code == 500
        assert response.json()["error"]["code"] == "INTERNAL_ERROR"
        assert response.json()["error"]["message"] == "An unexpected error occurred"
    
    def test_unexpected_error_message_outside_production(self):
        client = TestClient(_build_app(is_production=False), raise_server_exceptions=False)
        
        response = client.get("/crash")
        
        assert response.json()["error"]["message"] == "secret internals"
    
    def test_custom_formatter(self):
        app = _build_app(response_formatter=lambda exc: {"detail": exc.message})
        client = TestClient(app, raise_server_exceptions=False)
        
        response = client.get("/missing")
        
        assert response.json() == {"detail": "Tenant cmp_1 not found"}
