"""Tests for the view and asset indexers."""

from __future__ import annotations

from laraindex.indexers import AssetIndexer, ViewIndexer
from laraindex.models import AssetType
from laraindex.syntax import PhpParser
from tests._fixtures.project_builder import ProjectBuilder


def test_view_is_reachable_through_every_alias(project_builder: ProjectBuilder) -> None:
    project_builder.write({"resources/views/users/index.blade.php": "<h1>Users</h1>\n"})
    indexer = ViewIndexer(project_builder.tree(), PhpParser())

    infos = {key: indexer.get(key) for key in ("users.index", "users/index", "users.index.blade.php")}

    assert all(info is not None for info in infos.values())
    assert len(set(infos.values())) == 1
    assert infos["users.index"].file == "resources/views/users/index.blade.php"
    assert indexer.get_all() == ["users.index"]
    assert indexer.get_path("users/index") == "users/index.blade.php"


def test_views_from_modules_and_plain_php(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "resources/views/emails/plain.php": "<p>plain</p>\n",
            "Modules/Blog/Resources/views/post.blade.php": "<article></article>\n",
        }
    )
    indexer = ViewIndexer(project_builder.tree(), PhpParser())

    assert indexer.is_known("emails.plain")
    assert indexer.is_known("modules.Blog.post")
    assert indexer.resolve("emails/plain.php").name == "emails.plain"


def test_view_declarations_resolve_cached_variants(project_builder: ProjectBuilder) -> None:
    project_builder.write({"resources/views/layouts/app.blade.php": "@yield('content')\n"})
    indexer = ViewIndexer(project_builder.tree(), PhpParser())

    cached = indexer.find_declarations("layouts.app")
    probed = indexer.find_declarations("layouts.app.blade")

    assert [site.path for site in cached] == ["resources/views/layouts/app.blade.php"]
    assert probed == []
    assert indexer.find_declarations("missing.view") == []


def test_view_declarations_probe_files_added_after_the_scan(project_builder: ProjectBuilder) -> None:
    project_builder.write({"resources/views/home.blade.php": "<h1>Home</h1>\n"})
    indexer = ViewIndexer(project_builder.tree(), PhpParser())
    indexer.warm()
    project_builder.write({"resources/views/new/page.blade.php": "<p>new</p>\n"})

    assert not indexer.is_known("new.page")
    assert [site.path for site in indexer.find_declarations("new.page")] == [
        "resources/views/new/page.blade.php"
    ]
    assert [site.path for site in indexer.find_declarations("new/page")] == [
        "resources/views/new/page.blade.php"
    ]


def test_assets_are_keyed_by_root_relative_path(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "public/css/app.css": "body {}\n",
            "public/images/logo.png": "png",
            "resources/js/app.js": "console.log('app')\n",
            "resources/assets/fonts/icons.woff2": "font",
            "public/index.php": "<?php\n",
        }
    )
    indexer = AssetIndexer(project_builder.tree(), PhpParser())

    assert indexer.get_type("css/app.css") is AssetType.CSS
    assert indexer.get_type("images/logo.png") is AssetType.IMAGE
    assert indexer.get_type("js/app.js") is AssetType.JS
    assert indexer.get_type("assets/fonts/icons.woff2") is AssetType.FONT
    assert not indexer.is_known("index.php")
    assert indexer.get_path("js/app.js") == "app.js"


def test_asset_resolution_variants(project_builder: ProjectBuilder) -> None:
    project_builder.write({"public/css/app.css": "body {}\n", "resources/css/app.css": "body {}\n"})
    indexer = AssetIndexer(project_builder.tree(), PhpParser())

    info = indexer.resolve("/css/app.css?v=2")

    assert info is not None
    assert info.file == "public/css/app.css"
    assert indexer.resolve("resources/css/app.css").file == "public/css/app.css"
    assert [site.path for site in indexer.find_declarations("/css/app.css")] == ["public/css/app.css"]
    assert indexer.find_declarations("css/missing.css") == []
