"""Tests for laraindex.normalize."""

from __future__ import annotations

import pytest

from laraindex.models import AssetType
from laraindex.normalize import (
    asset_lookup_variants,
    asset_type_for,
    build_full_name,
    build_full_path,
    extract_domain_parameters,
    extract_parameters,
    infer_parameter_type,
    is_asset_extension,
    normalize_domain,
    normalize_path,
    split_middleware,
    view_keys,
    view_name,
    view_name_variants,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("", "/"),
        ("/", "/"),
        ("///", "/"),
        ("users", "/users"),
        ("//users///list/", "/users/list"),
        ("  admin/users  ", "/admin/users"),
    ],
)
def test_normalize_path_has_single_leading_slash(raw: str, expected: str) -> None:
    assert normalize_path(raw) == expected


def test_build_full_path_joins_prefix_and_own_path() -> None:
    assert build_full_path("/list", "/admin/users") == "/admin/users/list"
    assert build_full_path("/", "admin") == "/admin"
    assert build_full_path("users", "") == "/users"
    assert build_full_path("", "") == "/"


def test_build_full_name_suppresses_empty_segments() -> None:
    assert build_full_name("users", "admin.") == "admin.users"
    assert build_full_name(".users", "admin") == "admin.users"
    assert build_full_name("list", "admin.users.") == "admin.users.list"
    assert build_full_name(None, "admin.") is None
    assert build_full_name("", "") is None


def test_extract_parameters_reads_optional_and_constraints() -> None:
    parameters = extract_parameters("/users/{id}/posts/{slug?}", {"id": "[0-9]+"})

    assert [parameter.name for parameter in parameters] == ["id", "slug"]
    assert parameters[0].inferred_type == "integer"
    assert parameters[0].constraint_pattern == "[0-9]+"
    assert parameters[0].optional is False
    assert parameters[1].optional is True
    assert parameters[1].inferred_type == "slug"


def test_infer_parameter_type_prefers_pattern() -> None:
    assert infer_parameter_type("value", r"\d+") == "integer"
    assert infer_parameter_type("user_id") == "integer"
    assert infer_parameter_type("published_date") == "date"
    assert infer_parameter_type("name") == "string"


def test_domain_helpers() -> None:
    assert normalize_domain("https://{tenant}.example.com/") == "{tenant}.example.com"
    parameters = extract_domain_parameters("{account?}.example.com")
    assert len(parameters) == 1
    assert parameters[0].name == "account"
    assert parameters[0].optional is True


def test_split_middleware_parameters() -> None:
    assert split_middleware("throttle:60,1") == ("throttle", ("60", "1"))
    assert split_middleware("auth") == ("auth", ())


def test_view_name_and_aliases() -> None:
    name, extension = view_name("users/index.blade.php")
    assert (name, extension) == ("users.index", "blade.php")
    assert view_keys(name, extension) == [
        "users.index",
        "users/index",
        "users.index.blade.php",
        "users.index.php",
    ]
    assert view_name("mail/welcome.blade.php", "modules.Blog")[0] == "modules.Blog.mail.welcome"


def test_view_name_variants_order() -> None:
    assert view_name_variants("users/index.blade.php") == [
        "users/index.blade.php",
        "users.index.blade.php",
        "users/index/blade/php",
        "users/index",
    ]


def test_asset_helpers() -> None:
    assert asset_type_for("css/app.css") is AssetType.CSS
    assert asset_type_for("fonts/icons.woff2") is AssetType.FONT
    assert asset_type_for("docs/manual.pdf") is AssetType.OTHER
    assert is_asset_extension("manual.pdf")
    assert not is_asset_extension("index.php")
    assert asset_lookup_variants("/css/app.css?v=3") == ["/css/app.css", "css/app.css"]
    assert "js/app.js" in asset_lookup_variants("resources/js/app.js")
