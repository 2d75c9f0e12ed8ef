"""
API tests for modules, articles and forms: ordering, public vs authenticated parity,
admin CRUD, cascades and error bodies.
"""
from sqlalchemy import func, select

from navigator.models import Article, Form


def test_modules_ordered_by_number_then_created(client, make_module):
    make_module(3, "Third")
    make_module(1, "First")
    make_module(2, "Second")
    r = client.get("/api/modules")
    assert r.status_code == 200
    assert [m["moduleName"] for m in r.json()] == ["First", "Second", "Third"]
    assert set(r.json()[0]) == {"id", "moduleNumber", "moduleName", "createdAt"}


def test_public_and_authenticated_payloads_match(client, make_module, make_article, make_user, auth_headers):
    module = make_module()
    make_article(module, 2, "B")
    make_article(module, 1, "A")
    headers = auth_headers(make_user())
    assert client.get("/api/modules/public").json() == client.get("/api/modules/authenticated", headers=headers).json()
    public = client.get(f"/api/modules/{module.id}/articles/public").json()
    authed = client.get(f"/api/modules/{module.id}/articles/authenticated", headers=headers).json()
    assert public == authed
    assert [a["articleName"] for a in public] == ["A", "B"]


def test_module_forms_listing(client, make_module, make_form, make_user, auth_headers):
    module = make_module()
    make_form(module, 2, "Second")
    make_form(module, 1, "First")
    r = client.get(f"/api/modules/{module.id}/forms")
    assert [f["formName"] for f in r.json()] == ["First", "Second"]
    assert r.json()[0]["questions"][0]["id"] == "q1"
    authed = client.get(f"/api/modules/{module.id}/forms/authenticated", headers=auth_headers(make_user()))
    assert authed.json() == r.json()


def test_admin_modules_include_articles(client, make_module, make_article, admin_headers):
    module = make_module()
    make_article(module, 2, "B")
    make_article(module, 1, "A")
    r = client.get("/api/admin/modules", headers=admin_headers)
    assert r.status_code == 200
    assert [a["articleName"] for a in r.json()[0]["articles"]] == ["A", "B"]


def test_create_module_requires_fields(client, admin_headers):
    r = client.post("/api/modules", json={"moduleName": "No number"}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json() == {"error": "Module number and name are required"}


def test_create_update_delete_module(client, admin_headers):
    r = client.post("/api/modules", json={"moduleNumber": 4, "moduleName": "Policies"}, headers=admin_headers)
    assert r.status_code == 201
    module_id = r.json()["id"]
    r = client.put(f"/api/modules/{module_id}", json={"moduleNumber": 5, "moduleName": "Policy"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["moduleNumber"] == 5
    r = client.delete(f"/api/modules/{module_id}", headers=admin_headers)
    assert r.status_code == 200
    assert client.get("/api/modules").json() == []


def test_module_writes_require_admin(client, make_user, auth_headers):
    r = client.post("/api/modules", json={"moduleNumber": 1, "moduleName": "X"}, headers=auth_headers(make_user()))
    assert r.status_code == 403
    r = client.post("/api/modules", json={"moduleNumber": 1, "moduleName": "X"})
    assert r.status_code == 401


def test_delete_module_cascades(client, db, make_module, make_article, make_form, admin_headers):
    module = make_module()
    make_article(module, 1)
    make_form(module, 1)
    r = client.delete(f"/api/modules/{module.id}", headers=admin_headers)
    assert r.status_code == 200
    assert db.scalar(select(func.count()).select_from(Article)) == 0
    assert db.scalar(select(func.count()).select_from(Form)) == 0


def test_update_missing_module_404(client, admin_headers):
    r = client.put("/api/modules/999", json={"moduleNumber": 1, "moduleName": "X"}, headers=admin_headers)
    assert r.status_code == 404
    assert r.json() == {"error": "Module not found"}


def test_create_article_appends_position(client, make_module, admin_headers):
    module = make_module()
    positions = []
    for name in ("One", "Two", "Three"):
        r = client.post(
            "/api/articles",
            json={"moduleId": module.id, "articleName": name, "content": "# Hello"},
            headers=admin_headers,
        )
        assert r.status_code == 201, r.text
        positions.append(r.json()["position"])
    assert positions == [1, 2, 3]


def test_create_article_missing_fields(client, make_module, admin_headers):
    module = make_module()
    r = client.post("/api/articles", json={"moduleId": module.id, "articleName": "x"}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json() == {"error": "Module ID, article name, and content are required"}


def test_create_article_unknown_module(client, admin_headers):
    r = client.post(
        "/api/articles",
        json={"moduleId": 999, "articleName": "x", "content": "y"},
        headers=admin_headers,
    )
    assert r.status_code == 404


def test_get_article_includes_module(client, make_module, make_article):
    module = make_module(2, "Second")
    article = make_article(module, 1, "Intro")
    r = client.get(f"/api/articles/{article.id}")
    assert r.status_code == 200
    assert r.json()["module"]["moduleName"] == "Second"
    assert client.get("/api/articles/999").status_code == 404


def test_update_and_delete_article(client, make_module, make_article, admin_headers):
    article = make_article(make_module(), 1)
    r = client.put(
        f"/api/articles/{article.id}",
        json={"articleName": "Renamed", "content": "new body"},
        headers=admin_headers,
    )
    assert r.status_code == 200
    assert r.json()["articleName"] == "Renamed"
    r = client.put("/api/articles/999", json={"articleName": "x", "content": "y"}, headers=admin_headers)
    assert r.status_code == 404
    assert client.delete(f"/api/articles/{article.id}", headers=admin_headers).status_code == 200
    assert client.delete(f"/api/articles/{article.id}", headers=admin_headers).status_code == 404


def test_non_numeric_path_id_is_400(client):
    r = client.get("/api/articles/abc")
    assert r.status_code == 400
    assert "error" in r.json()


def test_form_crud(client, make_module, admin_headers):
    module = make_module()
    body = {
        "moduleId": module.id,
        "formName": "Readiness check",
        "questions": [
            {"id": "q1", "text": "Do you use ban-the-box?", "type": "select", "options": ["yes", "no"], "required": True},
        ],
    }
    r = client.post("/api/forms", json=body, headers=admin_headers)
    assert r.status_code == 201, r.text
    form = r.json()
    assert form["position"] == 1
    assert form["questions"][0]["options"] == ["yes", "no"]
    r = client.put(f"/api/forms/{form['id']}", json={"formName": "Readiness"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["formName"] == "Readiness"
    assert r.json()["questions"] == form["questions"]
    assert client.delete(f"/api/forms/{form['id']}", headers=admin_headers).status_code == 200
    assert client.put(f"/api/forms/{form['id']}", json={"formName": "x"}, headers=admin_headers).status_code == 404


def test_form_question_type_validated(client, make_module, admin_headers):
    body = {
        "moduleId": make_module().id,
        "formName": "Bad",
        "questions": [{"id": "q1", "text": "?", "type": "slider"}],
    }
    r = client.post("/api/forms", json=body, headers=admin_headers)
    assert r.status_code == 400
