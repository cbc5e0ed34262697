import pytest
from fastapi.testclient import TestClient

from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.main import app
from backend.app.models.invoice_template import InvoiceTemplate
from backend.app.services.invoice_layouts import InvoiceLayout
from backend.app.services.invoice_templates import (
    BUILTIN_TEMPLATES,
    DEFAULT_TEMPLATE_ID,
    build_template_preview,
    resolve_template,
    seed_system_templates,
)


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def register_and_login(client: TestClient, email: str, password: str) -> str:
    client.post("/auth/register", json={"email": email, "password": password})
    resp = client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200
    return resp.json()["access_token"]


def test_builtin_registry_has_one_default():
    assert [t.name for t in BUILTIN_TEMPLATES.values()] == ["Classic", "Modern", "Professional"]
    defaults = [t.id for t in BUILTIN_TEMPLATES.values() if t.is_default]
    assert defaults == [DEFAULT_TEMPLATE_ID] == [1]


def test_resolve_unknown_template_returns_default():
    assert resolve_template(999).id == 1
    assert resolve_template(None).id == 1
    assert resolve_template(3).name == "Professional"


def test_preview_mirrors_renderer_block_order():
    preview = build_template_preview(2, "Generated by InvoiceFlow")
    assert preview["available"] is True
    assert preview["name"] == "Modern"
    blocks = [block["block"] for block in preview["blocks"]]
    assert blocks == list(InvoiceLayout.BLOCKS) + ["footer"]
    items = preview["blocks"][blocks.index("items")]["content"]
    assert [row["description"] for row in items["rows"]] == ["Item 1", "Item 2"]
    totals = preview["blocks"][blocks.index("totals")]["content"]
    assert totals == {"subtotal": "$200.00", "tax": "$20.00", "total": "$220.00"}
    assert preview["blocks"][0]["content"]["style"]["header_band"] is True


def test_preview_for_unknown_template_is_placeholder():
    preview = build_template_preview(42, "Generated by InvoiceFlow")
    assert preview["available"] is False
    assert preview["blocks"] == []


def test_catalog_falls_back_to_builtins_when_empty():
    client = TestClient(app)
    token = register_and_login(client, "tmpl1@example.com", "secret")
    resp = client.get("/invoice-templates", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    data = resp.json()
    assert [row["id"] for row in data] == [1, 2, 3]
    assert [row["is_default"] for row in data] == [True, False, False]


def test_catalog_lists_persisted_rows():
    with SessionLocal() as db:
        assert seed_system_templates(db) == 3
        assert seed_system_templates(db) == 0
        db.add(InvoiceTemplate(name="Minimal", configuration={}, is_default=False, is_system=False))
        db.commit()

    client = TestClient(app)
    token = register_and_login(client, "tmpl2@example.com", "secret")
    resp = client.get("/invoice-templates", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    names = [row["name"] for row in resp.json()]
    assert names == ["Classic", "Modern", "Professional", "Minimal"]


def test_preview_endpoint():
    client = TestClient(app)
    token = register_and_login(client, "tmpl3@example.com", "secret")
    headers = {"Authorization": f"Bearer {token}"}

    resp = client.get("/invoice-templates/3/preview", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["name"] == "Professional"
    assert resp.json()["blocks"][-1]["content"]["text"] == "Generated by InvoiceFlow - Page 1"

    missing = client.get("/invoice-templates/999/preview", headers=headers)
    assert missing.status_code == 200
    assert missing.json()["available"] is False
