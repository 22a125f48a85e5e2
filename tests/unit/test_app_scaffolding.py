from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import jwt
import pytest
from fastapi.testclient import TestClient

from src.blogmedia.auth.auth_service import hash_password
from src.blogmedia.config import AppConfig, StorageSettings, WatermarkSettings
from src.blogmedia.main import create_app
from src.blogmedia.storage.local_storage import FileSystemImageStorage
from tests.helpers.images import make_image, open_image


def build_config(root: Path, **overrides) -> AppConfig:
    values = {
        "storage": StorageSettings(root=root),
        "admin_username": "owner",
        "admin_password_hash": hash_password("secret"),
        "jwt_signing_key": "test-signing-key",
        "session_secret": "test-session-secret",
    }
    values.update(overrides)
    return AppConfig(**values)


def login(client: TestClient) -> dict[str, str]:
    response = client.post("/api/login", json={"username": "owner", "password": "secret"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def test_create_app_wires_services(tmp_path: Path) -> None:
    app = create_app(build_config(tmp_path))

    assert isinstance(app.state.storage, FileSystemImageStorage)
    for name in ("image_service", "avatar_service", "captcha_service", "auth_service", "origin_saver"):
        assert hasattr(app.state, name)
    paths = {route.path for route in app.routes}
    assert {"/uploads/{filename}", "/image/upload", "/get-captcha-image", "/avatar", "/api/login"} <= paths


def test_upload_watermarks_keeps_origin_and_serves_result(tmp_path: Path) -> None:
    config = build_config(
        tmp_path,
        watermark=WatermarkSettings(is_enabled=True, keep_origin_image=True),
        small_image_pixels_threshold=0,
    )
    source = make_image(240, 160, color=(255, 255, 255))

    with TestClient(create_app(config)) as client:
        headers = login(client)
        response = client.post(
            "/image/upload",
            files={"file": ("Holiday.PNG", source, "image/png")},
            headers=headers,
        )
        assert response.status_code == 200
        location = response.json()["location"]
        assert location.startswith("/uploads/") and location.endswith(".png")

        served = client.get(location)
        assert served.status_code == 200
        assert served.headers["content-type"] == "image/png"

    stored_name = location.removeprefix("/uploads/")
    origin_name = stored_name.replace(".png", "-origin.png")
    assert (tmp_path / origin_name).read_bytes() == source
    primary = (tmp_path / stored_name).read_bytes()
    assert primary == served.content
    assert primary != source
    assert open_image(primary).size == (240, 160)


def test_gif_upload_is_stored_verbatim(tmp_path: Path) -> None:
    config = build_config(tmp_path, small_image_pixels_threshold=0)
    source = make_image(50, 50, image_format="GIF")

    with TestClient(create_app(config)) as client:
        response = client.post(
            "/image/upload",
            files={"file": ("anim.gif", source, "image/gif")},
            headers=login(client),
        )

    assert response.status_code == 200
    stored = tmp_path / response.json()["location"].removeprefix("/uploads/")
    assert stored.read_bytes() == source


def test_public_endpoints_work_without_login(tmp_path: Path) -> None:
    with TestClient(create_app(build_config(tmp_path))) as client:
        avatar = client.get("/avatar")
        captcha = client.get("/get-captcha-image")
        missing = client.get("/uploads/nothing-here.png")

    assert avatar.status_code == 200
    assert captcha.status_code == 200
    assert captcha.headers["content-type"] == "image/png"
    assert "session" in captcha.cookies
    assert missing.status_code == 200
    assert missing.headers["content-type"] == "image/png"


@pytest.mark.parametrize("field", ["jwt_signing_key", "session_secret"])
@pytest.mark.parametrize("value", ["", "   "])
def test_create_app_refuses_missing_secrets(tmp_path: Path, field: str, value: str) -> None:
    with pytest.raises(RuntimeError, match="not configured"):
        create_app(build_config(tmp_path, **{field: value}))


def test_create_app_refuses_unset_signing_key(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("BLOGMEDIA_JWT_SIGNING_KEY", raising=False)
    monkeypatch.setenv("BLOGMEDIA_STORAGE__ROOT", str(tmp_path))

    with pytest.raises(RuntimeError, match="BLOGMEDIA_JWT_SIGNING_KEY"):
        create_app()


def test_upload_rejects_token_signed_with_another_key(tmp_path: Path) -> None:
    now = datetime.now(tz=timezone.utc)
    forged = jwt.encode(
        {
            "sub": "anyone",
            "scope": "admin",
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(hours=1)).timestamp()),
        },
        "change-me",
        algorithm="HS256",
    )

    with TestClient(create_app(build_config(tmp_path))) as client:
        response = client.post(
            "/image/upload",
            files={"file": ("cat.png", make_image(10, 10), "image/png")},
            headers={"Authorization": f"Bearer {forged}"},
        )

    assert response.status_code == 401
    assert list(tmp_path.iterdir()) == []
