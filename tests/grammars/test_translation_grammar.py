"""Tests for the translation reference grammar."""

from __future__ import annotations

from laraindex.grammars.translation import (
    in_translation_cache,
    is_language_file,
    language_key,
    translation_reference,
)
from tests._fixtures.project_builder import find_literal, parse_php


def test_translation_functions_and_methods() -> None:
    document = parse_php(
        """
        <?php
        echo __('messages.welcome');
        echo trans_choice('messages.apples', 3);
        echo Lang::get('auth.failed');
        echo $translator->get('auth.throttle');
        echo $request->get('auth.password');
        echo __('messages.hello', ['name' => 'user.name']);
        """
    )

    assert translation_reference(find_literal(document, "messages.welcome"))
    assert translation_reference(find_literal(document, "messages.apples"))
    assert translation_reference(find_literal(document, "auth.failed"))
    assert translation_reference(find_literal(document, "auth.throttle"))
    assert not translation_reference(find_literal(document, "auth.password"))
    assert not translation_reference(find_literal(document, "user.name"))


def test_language_key_only_inside_language_files() -> None:
    source = """
        <?php
        return ['failed' => 'These credentials do not match.'];
        """
    in_lang = parse_php(source, "lang/en/auth.php")
    elsewhere = parse_php(source, "config/auth.php")

    assert is_language_file("resources/lang/en/auth.php")
    assert not is_language_file("config/auth.php")
    assert language_key(find_literal(in_lang, "failed"), in_lang.path)
    assert not language_key(find_literal(in_lang, "These credentials do not match."), in_lang.path)
    assert not language_key(find_literal(elsewhere, "failed"), elsewhere.path)


def test_cache_membership_rejects_numeric_text() -> None:
    cache = {"Welcome", "404"}

    assert in_translation_cache("Welcome", cache)
    assert not in_translation_cache("404", cache)
    assert not in_translation_cache("", cache)
    assert not in_translation_cache("Goodbye", cache)
