from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi.testclient import TestClient

from dropfiles.auth import create_access_token
from dropfiles.config import Settings
from main import create_app


@pytest.fixture
def secured(upload_dir):
    settings = Settings(upload_dir=str(upload_dir), auth_enabled=True, jwt_secret_key="test-secret-0123456789abcdef0123456789")
    return settings, TestClient(create_app(settings))


def test_auth_disabled_by_default(client):
    assert client.get("/api/files").status_code == 200


def test_missing_token_is_rejected(secured):
    _, client = secured
    response = client.get("/api/files")
    assert response.status_code == 401


def test_valid_token_is_accepted(secured, make_upload):
    settings, client = secured
    make_upload("a1", 3, b"abc")
    token = create_access_token("test_device", settings)

    response = client.get("/api/files/a1", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.content == b"abc"


def test_expired_token(secured):
    settings, client = secured
    token = create_access_token("test_device", settings, timedelta(minutes=-5))

    response = client.get("/api/files", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Token expired"


def test_token_signed_with_another_key(secured, upload_dir):
    _, client = secured
    other = Settings(upload_dir=str(upload_dir), jwt_secret_key="someone-else-0123456789abcdef0123456789")
    token = create_access_token("test_device", other)

    response = client.get("/api/files", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid token"


def test_health_stays_open(secured):
    _, client = secured
    assert client.get("/health").status_code == 200


def test_unknown_setting_is_rejected():
    with pytest.raises(AttributeError):
        Settings(no_such_setting=1)


def test_token_without_subject_is_invalid(secured):
    settings, client = secured
    expire = datetime.now(timezone.utc) + timedelta(minutes=5)
    token = jwt.encode({"exp": expire}, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

    response = client.get("/api/files", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid token"
    assert response.headers["www-authenticate"] == "Bearer"
