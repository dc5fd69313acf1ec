"""Tests for the FastAPI query service."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from laraindex.service import create_app
from tests._fixtures.project_builder import ProjectBuilder


@pytest.fixture
def client(project_builder: ProjectBuilder) -> TestClient:
    project_builder.write(
        {
            "routes/web.php": """
            <?php

            Route::middleware('auth')->group(function () {
                Route::get('/users/{id}', 'UserController@show')->name('users.show')->middleware('throttle:10,1');
            });
            """,
            "resources/views/users/show.blade.php": """
            <h1>{{ __('users.title') }}</h1>
            <a href="{{ route('users.show', 1) }}">Self</a>
            """,
            "lang/en/users.php": "<?php\nreturn ['title' => 'User'];\n",
            "lang/fr/users.php": "<?php\nreturn ['title' => 'Utilisateur'];\n",
            "public/js/app.js": "console.log('app');\n",
        }
    )
    return TestClient(create_app(project_builder.index))


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_routes_listing_and_detail(client: TestClient) -> None:
    listing = client.get("/routes").json()
    assert [item["key"] for item in listing] == ["users.show"]
    assert listing[0]["middleware"] == ["auth", "throttle:10,1"]

    detail = client.get("/routes/users.show").json()
    assert detail["uri"] == "/users/{id}"
    assert detail["action"] == {
        "controller": "UserController",
        "method": "show",
        "namespace": None,
        "is_closure": False,
    }
    assert [(item["name"], item["source"]) for item in detail["middleware"]] == [
        ("throttle", "route"),
        ("auth", "group"),
    ]
    assert detail["parameters"][0] == {"name": "id", "type": "integer", "optional": False, "pattern": None}
    assert detail["declarations"] == [{"path": "routes/web.php", "line": 3}]
    assert detail["usages"] == [
        {"file": "resources/views/users/show.blade.php", "line_number": 1, "usage_kind": "name"}
    ]


def test_unknown_route_is_404(client: TestClient) -> None:
    assert client.get("/routes/nope").status_code == 404


def test_translations_endpoints(client: TestClient) -> None:
    listing = client.get("/translations").json()
    assert listing == [{"key": "users.title", "locale": "fr", "value": "Utilisateur"}]

    detail = client.get("/translations/users.title").json()
    assert detail["values"] == {"en": "User", "fr": "Utilisateur"}
    assert len(detail["declarations"]) == 2
    assert detail["usages"][0]["line_number"] == 0
    assert client.get("/translations/users.missing").status_code == 404


def test_views_assets_and_lookup(client: TestClient) -> None:
    assert client.get("/views").json() == [
        {"name": "users.show", "path": "users/show.blade.php", "file": "resources/views/users/show.blade.php"}
    ]
    assert client.get("/assets").json() == [
        {"name": "js/app.js", "path": "js/app.js", "type": "js", "file": "public/js/app.js"}
    ]
    assert client.get("/lookup", params={"text": "users.show"}).json() == {"text": "users.show", "kind": "route"}
    assert client.get("/lookup", params={"text": "users/show"}).json()["kind"] == "view"
    assert client.get("/lookup", params={"text": "unknown"}).json()["kind"] is None


def test_usages_endpoint(client: TestClient) -> None:
    response = client.get("/usages/translation/users.title")
    assert response.status_code == 200
    assert [item["file"] for item in response.json()] == ["resources/views/users/show.blade.php"]
    assert client.get("/usages/widget/users.title").status_code == 404


def test_refresh_endpoint(client: TestClient) -> None:
    response = client.post("/refresh")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["routes"] == 1
    assert data["translations"] == 1
    assert data["views"] == 1
    assert data["assets"] == 1
    assert data["usages"] == 2
