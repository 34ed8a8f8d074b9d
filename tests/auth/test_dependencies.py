"""
Tests for the auth and role guards.
"""
from datetime import datetime, timedelta, timezone

from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from hospital_api.auth.dependencies import require_auth, require_permission, require_roles
from hospital_api.auth.models import UserRole
from hospital_api.core.permissions import Permission
from hospital_api.core.security import TokenService
from hospital_api.exceptions import register_exception_handlers
from tests.conftest import auth_header


def make_guarded_app(*guards):
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/guarded", dependencies=[Depends(guard) for guard in guards])
    def guarded():
        return {"success": True}

    return app


def test_role_guard_without_auth_guard_is_unauthenticated():
    app = make_guarded_app(require_roles(UserRole.PROVIDER))
    response = TestClient(app).get("/guarded")

    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Unauthorized"}


def test_guards_compose_in_order(token_service):
    app = make_guarded_app(require_auth, require_roles(UserRole.PROVIDER))
    client = TestClient(app)

    provider_token = token_service.issue({"id": "p-1", "email": "doc@x.com", "role": "PROVIDER"})
    patient_token = token_service.issue({"id": "u-1", "email": "a@x.com", "role": "PATIENT"})

    assert client.get("/guarded").status_code == 401
    assert client.get("/guarded", headers=auth_header(patient_token)).status_code == 403
    assert client.get("/guarded", headers=auth_header(provider_token)).status_code == 200


def test_role_guard_accepts_any_listed_role(token_service):
    app = make_guarded_app(require_auth, require_roles(UserRole.PATIENT, UserRole.PROVIDER))
    token = token_service.issue({"id": "u-1", "email": "a@x.com", "role": "PATIENT"})

    assert TestClient(app).get("/guarded", headers=auth_header(token)).status_code == 200


def test_permission_guard_admits_roles_holding_the_permission(token_service):
    app = make_guarded_app(require_auth, require_permission(Permission.CREATE_PATIENT_DETAILS))
    client = TestClient(app)

    provider_token = token_service.issue({"id": "p-1", "email": "doc@x.com", "role": "PROVIDER"})
    patient_token = token_service.issue({"id": "u-1", "email": "a@x.com", "role": "PATIENT"})

    assert client.get("/guarded", headers=auth_header(provider_token)).status_code == 200
    denied = client.get("/guarded", headers=auth_header(patient_token))
    assert denied.status_code == 403
    assert denied.json()["message"] == "Access denied. Insufficient permissions."


def test_provider_only_route_rejects_patient(client, patient):
    response = client.get("/api/patients", headers=patient["headers"])

    assert response.status_code == 403
    assert response.json() == {"success": False, "message": "Access denied. Insufficient permissions."}


def test_non_bearer_scheme_counts_as_missing_token(client):
    response = client.get("/api/auth/whoMI", headers={"Authorization": "Basic dXNlcjpwYXNz"})

    assert response.status_code == 401
    assert response.json()["message"] == "No token provided"
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_expired_token_is_rejected(client, patient, token_service):
    long_ago = datetime.now(timezone.utc) - timedelta(days=8)
    token = token_service.issue({"id": patient["id"], "email": patient["email"], "role": "PATIENT"}, now=long_ago)

    response = client.get("/api/auth/whoMI", headers=auth_header(token))
    assert response.status_code == 401
    assert response.json()["message"] == "Token has expired"


def test_token_signed_with_other_key_is_rejected(client, patient):
    forged = TokenService(secret_key="someone-else").issue(
        {"id": patient["id"], "email": patient["email"], "role": "PROVIDER"}
    )

    response = client.get("/api/patients", headers=auth_header(forged))
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token signature"
