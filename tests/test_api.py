import io
import random
import time

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from PIL import Image

from api.routes_referral import setup_referral_routes
from api.routes_stickers import setup_sticker_routes
from api.routes_system import setup_system_routes
from managers.sticker_manager import StickerManager


class FakeMailManager:
    def __init__(self):
        self.sent = []

    async def send_verification(self, recipient, link):
        self.sent.append((recipient, link))
        return True


@pytest.fixture
def sticker_manager(items, reference_config):
    reference_config.relayout_debounce_ms = 10
    manager = StickerManager("unused.csv", reference_config, rng=random.Random(0))
    manager.set_catalog(items)
    return manager


@pytest.fixture
def mail_manager():
    return FakeMailManager()


@pytest.fixture
def client(sticker_manager, referral_manager, mail_manager):
    app = FastAPI()
    app.include_router(setup_sticker_routes(sticker_manager))
    app.include_router(setup_referral_routes(referral_manager, mail_manager))
    app.include_router(setup_system_routes(sticker_manager, referral_manager))
    with TestClient(app) as test_client:
        yield test_client


LAYOUT_REQUEST = {
    "viewport": {"width": 1920, "height": 1080},
    "protected": {"version": {"left": 1800, "top": 10, "right": 1900, "bottom": 40}},
    "main": {"left": 560, "top": 200, "right": 1360, "bottom": 880},
    "seed": 7,
}


def test_layout_pass_respects_measurements(client):
    response = client.post("/stickers/layout", json=LAYOUT_REQUEST)
    assert response.status_code == 200
    data = response.json()

    assert data["target_count"] == 20
    assert 0 < data["placed_count"] <= 20
    assert len(data["stickers"]) == data["placed_count"]
    assert len(data["exclusion_zones"]) == 1
    assert data["safe_zone"]["xMin"] < 560 / 1920 * 100

    again = client.post("/stickers/layout", json=LAYOUT_REQUEST).json()
    assert again["stickers"] == data["stickers"]


def test_layout_rejects_bad_viewport(client):
    response = client.post("/stickers/layout", json={"viewport": {"width": 0, "height": 1080}})
    assert response.status_code == 422


def test_catalog_listing(client):
    data = client.get("/stickers/catalog").json()
    assert data["count"] == 3
    assert data["stickers"][0]["image"] == "snowflake.png"


def test_first_catalog_load_produced_a_layout(client):
    data = client.get("/stickers/layout").json()
    assert data["placed_count"] > 0


def test_viewport_report_triggers_debounced_relayout(client, sticker_manager):
    passes = sticker_manager.layout_passes
    response = client.post("/stickers/viewport", json={"viewport": {"width": 390, "height": 844}})
    assert response.json()["scheduled"] is True

    deadline = time.time() + 2
    while sticker_manager.layout_passes == passes and time.time() < deadline:
        time.sleep(0.02)

    data = client.get("/stickers/layout").json()
    assert data["viewport"] == {"width": 390, "height": 844}
    assert data["safe_zone"] is None

    # Mobile address bar collapse: same width, new height
    response = client.post("/stickers/viewport", json={"viewport": {"width": 390, "height": 700}})
    assert response.json()["scheduled"] is False


def test_preview_returns_png(client):
    request = dict(LAYOUT_REQUEST, pointer_x=100, pointer_y=100)
    response = client.post("/stickers/preview", json=request)
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content.startswith(b"\x89PNG")


def test_referral_flow(client, mail_manager):
    assert client.post("/generate", json={}).status_code == 400

    response = client.post("/generate", json={"email": "rider@example.com"})
    assert response.status_code == 200
    assert response.json()["message"] == "Check your inbox for verification link"

    recipient, link = mail_manager.sent[-1]
    assert recipient == "rider@example.com"
    token = link.split("token=")[1]

    data = client.get("/verify", params={"token": token}).json()
    code = data["userCode"]
    assert data["referralLink"] == f"https://lessons.example.com/r/{code}"
    assert data["clickCount"] == 0

    response = client.get(f"/r/{code}", follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"] == (
        f"https://forms.example.com/survey?lang=en&referral={code}"
    )

    data = client.get("/verify", params={"token": token}).json()
    assert data["clickCount"] == 1

    qr = client.get(f"/r/{code}/qrcode")
    assert qr.status_code == 200
    assert qr.content.startswith(b"\x89PNG")


def test_verify_errors(client):
    assert client.get("/verify").status_code == 400
    response = client.get("/verify", params={"token": "nope"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid token"


def test_unknown_referral_code(client):
    assert client.get("/r/ZZZZZZ", follow_redirects=False).status_code == 404
    assert client.get("/r/ZZZZZZ/qrcode").status_code == 404


def test_health_and_layout_info(client):
    health = client.get("/health").json()
    assert health["status"] == "healthy"
    assert health["stickers"]["catalog_size"] == 3
    assert health["database"] is True

    info = client.get("/layout/info", params={"width": 1920, "height": 1080}).json()
    assert info["target_count"] == 20


def test_generate_rejects_multiline_email(client, mail_manager):
    response = client.post("/generate", json={"email": "a@b.com\nBcc: x@y.com"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid email"
    assert mail_manager.sent == []


def test_emptied_catalog_clears_current_layout(client, sticker_manager, tmp_path):
    assert client.get("/stickers/layout").json()["placed_count"] > 0

    catalog = tmp_path / "links.csv"
    catalog.write_text("image,link\n", encoding="utf-8")
    sticker_manager.catalog_path = str(catalog)

    response = client.post("/stickers/catalog/reload")
    assert response.json() == {"status": "success", "count": 0}

    data = client.get("/stickers/layout").json()
    assert data["placed_count"] == 0
    assert data["stickers"] == []


def test_preview_of_huge_viewport_is_bounded(client):
    request = {"viewport": {"width": 16384, "height": 16384}, "seed": 3}
    response = client.post("/stickers/preview", json=request)
    assert response.status_code == 200
    assert Image.open(io.BytesIO(response.content)).size == (2048, 2048)
