# tests/api/test_routes.py
# HTTP contract tests: real routers, middleware and services over
# in-memory repositories and stubbed AWS clients.

import pytest
from fastapi.testclient import TestClient

from sitegen.auth.dependencies import get_current_user_id
from sitegen.clients.s3_storage import AssetStore, HostingTarget, S3Bucket
from sitegen.dependencies import ServiceContainer
from sitegen.main import create_app
from sitegen.services.auth_service import AuthService
from sitegen.services.history_service import HistoryService
from sitegen.services.publish_service import PublishCoordinator
from sitegen.services.site_service import SiteService
from tests.fakes import FakeGenerationRepository, FakeModel, FakeUserRepository, InMemoryStore, StubS3Client

PAGE = "<!DOCTYPE html><html><body><h1>Kopi Nusantara</h1></body></html>"


@pytest.fixture
def env():
    store = InMemoryStore()
    users = FakeUserRepository(store)
    generations = FakeGenerationRepository(store)
    s3 = StubS3Client()
    model = FakeModel(PAGE)
    services = ServiceContainer(
        auth=AuthService(users),
        sites=SiteService(model, generations),
        history=HistoryService(generations),
        publisher=PublishCoordinator(
            users,
            HostingTarget(S3Bucket(s3, "sites", base_delay=0), "http://sites.test"),
        ),
        assets=AssetStore(S3Bucket(s3, "assets", base_delay=0), "https://assets.test", max_bytes=1024),
    )
    client = TestClient(create_app(services=services))
    return {"client": client, "store": store, "s3": s3, "model": model}


def _signup(client, email="sari@example.com"):
    response = client.post(
        "/api/auth/register",
        json={"name": "Sari", "email": email, "password": "rahasia123"},
    )
    assert response.status_code == 201
    login = client.post("/api/auth/login", json={"email": email, "password": "rahasia123"})
    assert login.status_code == 200
    return {"Authorization": f"Bearer {login.json()['access_token']}"}


def test_register_login_and_profile(env):
    client = env["client"]
    headers = _signup(client)

    response = client.get("/api/auth/me", headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["email"] == "sari@example.com"
    assert body["published_url"] is None


def test_duplicate_registration_is_409(env):
    client = env["client"]
    _signup(client)

    response = client.post(
        "/api/auth/register",
        json={"name": "Sari", "email": "sari@example.com", "password": "x"},
    )

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT"


def test_bad_login_is_401(env):
    client = env["client"]
    _signup(client)

    response = client.post("/api/auth/login", json={"email": "sari@example.com", "password": "salah"})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "AUTH_ERROR"


@pytest.mark.parametrize(
    "method, path",
    [
        ("post", "/api/generate"),
        ("post", "/api/edit"),
        ("get", "/api/generations"),
        ("get", "/api/generations/1"),
        ("delete", "/api/generations/1"),
        ("post", "/api/publish/1"),
        ("delete", "/api/publish"),
        ("post", "/api/upload"),
        ("get", "/api/auth/me"),
    ],
)
def test_protected_routes_require_token(env, method, path):
    response = getattr(env["client"], method)(path)

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "AUTH_ERROR"
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_invalid_token_is_401(env):
    response = env["client"].get("/api/generations", headers={"Authorization": "Bearer nope"})

    assert response.status_code == 401


def test_generate_missing_prompt_is_400(env):
    headers = _signup(env["client"])

    response = env["client"].post("/api/generate", json={"imageUrls": []}, headers=headers)

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert any("userPrompt" in f for f in error["details"]["fields"])


def test_generate_history_publish_flow(env):
    """Coffee shop in Bandung: generate, list, publish, then republish after unpublishing."""
    client, store, s3 = env["client"], env["store"], env["s3"]
    headers = _signup(client)

    generated = client.post(
        "/api/generate",
        json={"userPrompt": "Kedai kopi di Bandung", "imageUrls": ["https://assets.test/1-kopi.jpg"]},
        headers=headers,
    )
    assert generated.status_code == 200
    generation_id = generated.json()["generation_id"]
    assert generated.json()["html_code"] == PAGE

    history = client.get("/api/generations", headers=headers).json()
    assert len(history) == 1
    assert history[0]["id"] == generation_id
    assert history[0]["version_number"] == 1
    assert history[0]["preview"] == PAGE[:100]

    assert client.get(f"/api/generations/{generation_id}", headers=headers).json() == {"html_code": PAGE}

    published = client.post(f"/api/publish/{generation_id}", headers=headers)
    assert published.status_code == 200
    user_id = next(iter(store.users))
    assert published.json() == {"public_url": f"http://sites.test/{user_id}/"}
    assert s3.objects[f"sites/{user_id}/index.html"]["Body"] == PAGE.encode()

    again = client.post(f"/api/publish/{generation_id}", headers=headers)
    assert again.status_code == 409

    blocked = client.delete(f"/api/generations/{generation_id}", headers=headers)
    assert blocked.status_code == 409

    assert client.delete("/api/publish", headers=headers).json()["success"] is True
    assert f"sites/{user_id}/index.html" not in s3.objects
    assert client.get("/api/auth/me", headers=headers).json()["published_url"] is None

    deleted = client.delete(f"/api/generations/{generation_id}", headers=headers)
    assert deleted.status_code == 200
    assert deleted.json()["success"] is True
    assert client.get("/api/generations", headers=headers).json() == []


def test_edit_creates_new_version(env):
    client, model = env["client"], env["model"]
    headers = _signup(client)
    client.post("/api/generate", json={"userPrompt": "Kopi Nusantara"}, headers=headers)

    edited = client.post(
        "/api/edit",
        json={"userPrompt": "Make the header green", "imageUrls": [], "currentHtml": PAGE},
        headers=headers,
    )

    assert edited.status_code == 200
    assert PAGE in model.calls[-1]["user_turn"]["content"][0]["text"]
    history = client.get("/api/generations", headers=headers).json()
    assert [h["version_number"] for h in history] == [2, 1]


def test_other_users_generation_is_404(env):
    client = env["client"]
    owner = _signup(client)
    intruder = _signup(client, email="budi@example.com")
    generation_id = client.post(
        "/api/generate", json={"userPrompt": "Toko batik"}, headers=owner
    ).json()["generation_id"]

    assert client.get(f"/api/generations/{generation_id}", headers=intruder).status_code == 404
    assert client.delete(f"/api/generations/{generation_id}", headers=intruder).status_code == 404
    assert client.post(f"/api/publish/{generation_id}", headers=intruder).status_code == 404


def test_model_failure_is_502(env):
    from sitegen.middleware.error_handler import ModelInvocationError

    client = env["client"]
    headers = _signup(client)
    env["model"].error = ModelInvocationError()

    response = client.post("/api/generate", json={"userPrompt": "Warung bakso"}, headers=headers)

    assert response.status_code == 502
    assert response.json()["error"]["code"] == "MODEL_INVOCATION_ERROR"
    assert client.get("/api/generations", headers=headers).json() == []


def test_unpublish_when_nothing_published_succeeds(env):
    headers = _signup(env["client"])

    assert env["client"].delete("/api/publish", headers=headers).status_code == 200


def test_upload_image(env):
    client, s3 = env["client"], env["s3"]
    headers = _signup(client)

    response = client.post(
        "/api/upload",
        files={"image": ("foto kopi.png", b"\x89PNG\r\n", "image/png")},
        headers=headers,
    )

    assert response.status_code == 200
    url = response.json()["url"]
    assert url.startswith("https://assets.test/")
    assert url.endswith("-foto_kopi.png")
    assert any(key.startswith("assets/") for key in s3.objects)


def test_upload_without_file_is_400(env):
    headers = _signup(env["client"])

    response = env["client"].post("/api/upload", data={"note": "no file"}, headers=headers)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_oversized_upload_is_400(env):
    headers = _signup(env["client"])

    response = env["client"].post(
        "/api/upload",
        files={"image": ("big.png", b"x" * 2048, "image/png")},
        headers=headers,
    )

    assert response.status_code == 400


def test_dependency_override_identity(env):
    client, store = env["client"], env["store"]
    user_id = store.add_user()
    client.app.dependency_overrides[get_current_user_id] = lambda: user_id

    response = client.post("/api/generate", json={"user_prompt": "Snake case works too"})

    assert response.status_code == 200
    assert store.generations[response.json()["generation_id"]]["user_id"] == user_id


def test_liveness_probe(env):
    assert env["client"].get("/health/live").json() == {"status": "alive"}


def test_health_stays_up_when_database_is_down(env, monkeypatch):
    from sitegen.routers import health

    async def database_down():
        return health.DatabaseCheck(healthy=False, message="Database error: OSError")

    monkeypatch.setattr(health, "check_database_health", database_down)
    client = env["client"]

    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "degraded"
    assert response.json()["checks"]["database"]["healthy"] is False

    ready = client.get("/health/ready")
    assert ready.status_code == 503
    assert ready.json()["status"] == "not_ready"


def test_health_reports_ok_when_database_answers(env, monkeypatch):
    from sitegen.routers import health

    async def database_up():
        return health.DatabaseCheck(healthy=True, latency_ms=1.2, message="Pool size: 10")

    monkeypatch.setattr(health, "check_database_health", database_up)

    assert env["client"].get("/health").json()["status"] == "ok"
    assert env["client"].get("/health/ready").json() == {"status": "ready"}
