"""Tests for laraindex.facade."""

from __future__ import annotations

from pathlib import Path

import pytest

from laraindex.facade import ProjectIndex
from laraindex.models import ArtifactKind, AssetType, UsageKind
from tests._fixtures.project_builder import ProjectBuilder

FILES = {
    "routes/web.php": """
    <?php

    use Illuminate\\Support\\Facades\\Route;

    Route::get('/', fn () => view('welcome'))->name('home');
    Route::get('/about', 'PageController@about');
    """,
    "resources/views/welcome.blade.php": """
    <a href="{{ route('home') }}">Home</a>
    <a href="{{ url('/') }}">Root</a>
    <p>{{ __('messages.tagline') }}</p>
    <link href="/css/app.css" rel="stylesheet">
    """,
    "lang/en/messages.php": "<?php\nreturn ['tagline' => 'Ship it'];\n",
    "lang/de/messages.php": "<?php\nreturn ['tagline' => 'Los geht es'];\n",
    "public/css/app.css": "body {}\n",
}


@pytest.fixture
def index(project_builder: ProjectBuilder) -> ProjectIndex:
    project_builder.write(FILES)
    return project_builder.index()


def test_route_accessors(index: ProjectIndex) -> None:
    assert index.get_all_routes()[0] == "home"
    assert index.get_route_path("home") == "/"
    assert index.get_route_method("/about") == "GET"
    assert index.is_route("home")
    assert [site.line for site in index.find_route_declaration("home")] == [4]
    assert index.describe_route("/about").action.controller == "PageController"
    assert index.describe_route("missing") is None


def test_route_usages_merge_name_and_path(index: ProjectIndex) -> None:
    usages = index.get_route_usages("home")

    assert [(usage.line_number, usage.usage_kind) for usage in usages] == [
        (0, UsageKind.NAME_REFERENCE),
        (1, UsageKind.URL_REFERENCE),
    ]
    assert index.get_route_usages("/") == usages


def test_translation_view_and_asset_accessors(index: ProjectIndex) -> None:
    assert index.get_translation_value("messages.tagline") == "Ship it"
    assert index.get_translation_locale("messages.tagline") == "en"
    assert index.get_translation_locales() == ["de", "en"]
    assert len(index.find_translation_declarations("messages.tagline")) == 2
    assert [usage.line_number for usage in index.get_translation_usages("messages.tagline")] == [2]

    assert index.get_all_views() == ["welcome"]
    assert index.get_view_path("welcome") == "welcome.blade.php"
    assert [usage.file for usage in index.get_view_usages("welcome.blade.php")] == ["routes/web.php"]

    assert index.get_asset_type("css/app.css") is AssetType.CSS
    assert index.get_asset_path("css/app.css") == "css/app.css"
    assert [usage.line_number for usage in index.get_asset_usages("/css/app.css")] == [3]
    assert [site.path for site in index.find_asset_declaration("css/app.css")] == ["public/css/app.css"]


def test_classify_prefers_routes(index: ProjectIndex) -> None:
    assert index.classify("home") is ArtifactKind.ROUTE
    assert index.classify("messages.tagline") is ArtifactKind.TRANSLATION
    assert index.classify("welcome") is ArtifactKind.VIEW
    assert index.classify("/css/app.css") is ArtifactKind.ASSET
    assert index.classify("nothing.here") is None
    assert index.classify("") is None


def test_generic_dispatch(index: ProjectIndex) -> None:
    assert index.get_usages(ArtifactKind.VIEW, "welcome") == index.get_view_usages("welcome")
    assert index.find_declarations(ArtifactKind.ROUTE, "home") == index.find_route_declaration("home")


def test_lookup_failures_surface_as_not_found(index: ProjectIndex, monkeypatch: pytest.MonkeyPatch) -> None:
    def _boom(*_args: object, **_kwargs: object) -> None:
        raise RuntimeError("index unavailable")

    monkeypatch.setattr(index.routes, "get_declaration", _boom)
    monkeypatch.setattr(index.translations, "get_value", _boom)
    monkeypatch.setattr(index.usages, "get_usages", _boom)

    assert index.find_route_declaration("home") == []
    assert index.get_translation_value("messages.tagline") == ""
    assert index.get_route_usages("home") == []


def test_refresh_picks_up_new_declarations(index: ProjectIndex, project_builder: ProjectBuilder) -> None:
    assert not index.is_route("contact")

    target = project_builder.path() / "routes" / "web.php"
    target.write_text(
        target.read_text(encoding="utf-8") + "Route::get('/contact', 'ContactController')->name('contact');\n",
        encoding="utf-8",
    )
    index.refresh()

    assert index.is_route("contact")
    assert index.summary()["routes"] == 3


def test_open_rejects_missing_project(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        ProjectIndex.open(tmp_path / "missing")


def test_route_domains_are_normalized(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "routes/web.php": """
            <?php

            Route::domain('https://{tenant}.app.test/')->middleware('web')->group(function () {
                Route::get('/home', 'TenantController@home')->name('tenant.home');
            });
            """,
        }
    )
    index = project_builder.index()

    domains = index.get_route_domains()

    assert [domain.domain for domain in domains] == ["{tenant}.app.test"]
    assert [parameter.name for parameter in domains[0].parameters] == ["tenant"]
    assert domains[0].middleware == ("web",)
    assert index.describe_route("tenant.home").domain == "https://{tenant}.app.test/"
