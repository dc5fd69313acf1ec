"""Tests for the route reference/declaration grammar."""

from __future__ import annotations

from laraindex.grammars.route import controller_method_slot, route_declaration, route_reference
from tests._fixtures.project_builder import find_literal, parse_php

FACADES = ["Route"]


def test_route_helpers_are_references() -> None:
    document = parse_php(
        """
        <?php
        return redirect()->route('dashboard');
        $a = route('users.index');
        $b = url('/about');
        $c = action('HomeController@index');
        $d = URL::to('/contact');
        $e = URL::signedRoute('unsubscribe', ['user' => 1]);
        """
    )

    assert route_reference(find_literal(document, "dashboard")) == "name"
    assert route_reference(find_literal(document, "users.index")) == "name"
    assert route_reference(find_literal(document, "/about")) == "url"
    assert route_reference(find_literal(document, "HomeController@index")) == "action"
    assert route_reference(find_literal(document, "/contact")) == "url"
    assert route_reference(find_literal(document, "unsubscribe")) == "name"
    assert route_reference(find_literal(document, "user")) is None


def test_declaration_literals_are_not_references() -> None:
    document = parse_php(
        """
        <?php
        Route::get('/home', [HomeController::class, 'index'])->name('home');
        Route::match(['get', 'post'], '/search', 'SearchController');
        """
    )

    assert route_reference(find_literal(document, "home")) is None
    assert route_declaration(find_literal(document, "home"), FACADES)
    assert route_declaration(find_literal(document, "/home"), FACADES)
    assert route_declaration(find_literal(document, "/search"), FACADES)
    assert not route_declaration(find_literal(document, "get"), FACADES)


def test_controller_method_slot_is_excluded() -> None:
    document = parse_php(
        """
        <?php
        Route::get('/u', [UserController::class, 'index']);
        """
    )
    literal = find_literal(document, "index")

    assert controller_method_slot(literal)
    assert route_reference(literal) is None
    assert not route_declaration(literal, FACADES)


def test_unknown_facade_is_not_a_declaration() -> None:
    document = parse_php(
        """
        <?php
        Cache::get('/home');
        """
    )

    assert not route_declaration(find_literal(document, "/home"), FACADES)
    assert route_declaration(find_literal(document, "/home"), ["Cache"])
