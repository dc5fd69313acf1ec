"""Text-pattern tables for Blade templates and client scripts.

Each pattern captures the referenced key in group 1. ``hint`` tells the
usage scanner how a route capture was referenced (``name``, ``url`` or
``action``); ``multi`` patterns capture a list of quoted keys.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple

_QUOTED = re.compile(r"""['"]([^'"]+)['"]""")
# Body of a ``{{ ... }}`` or ``{!! ... !!}`` echo in group 1; ``echo_only`` patterns search inside it.
_ECHO_BODY = re.compile(r"(?:\{\{|\{!!)(.*?)(?:\}\}|!!\})", re.DOTALL)


@dataclass(frozen=True)
class TextPattern:
    regex: re.Pattern
    hint: str = "name"
    multi: bool = False
    echo_only: bool = False


def _p(
    pattern: str, hint: str = "name", multi: bool = False, flags: int = 0, echo_only: bool = False
) -> TextPattern:
    return TextPattern(regex=re.compile(pattern, flags), hint=hint, multi=multi, echo_only=echo_only)


BLADE_ROUTE_PATTERNS: Tuple[TextPattern, ...] = (
    _p(r"""\broute\(\s*['"]([^'"]+)['"]\s*[,)]""", echo_only=True),
    _p(r"""@route\(\s*['"]([^'"]+)['"]\s*[,)]"""),
    _p(r"""\burl\(\s*['"]([^'"]+)['"]\s*[,)]""", hint="url", echo_only=True),
    _p(r"""@url\(\s*['"]([^'"]+)['"]\s*[,)]""", hint="url"),
    _p(r"""\baction\(\s*['"]([^'"]+)['"]\s*[,)]""", hint="action", echo_only=True),
    _p(r"""@\w+\([^)\n]*?\broute\(\s*['"]([^'"]+)['"]\s*[,)]"""),
)

BLADE_TRANSLATION_PATTERNS: Tuple[TextPattern, ...] = (
    _p(r"""@(?:lang|choice|__|trans|translate)\(\s*['"]([^'"]+)['"]"""),
    _p(
        r"""(?<![\w$>:])(?:__|trans|trans_choice|translate|Lang::get|Lang::choice)\(\s*['"]([^'"]+)['"]""",
        echo_only=True,
    ),
)

BLADE_VIEW_PATTERNS: Tuple[TextPattern, ...] = (
    _p(r"""@(?:include|includeIf|extends|component|livewire|each)\(\s*['"]([^'"]+)['"]"""),
    _p(r"""@(?:includeWhen|includeUnless)\(\s*[^,]+,\s*['"]([^'"]+)['"]"""),
    _p(r"""@includeFirst\(\s*\[([^\]]*)\]""", multi=True),
    _p(r"""\bview\(\s*['"]([^'"]+)['"]""", echo_only=True),
)

BLADE_ASSET_PATTERNS: Tuple[TextPattern, ...] = (
    _p(r"""(?<![\w$>:])(?:asset|secure_asset|mix|elixir|vite_asset)\(\s*['"]([^'"]+)['"]"""),
    _p(r"""Vite::asset\(\s*['"]([^'"]+)['"]"""),
    _p(r"""@vite\(\s*\[([^\]]*)\]""", multi=True),
    _p(r"""@vite\(\s*['"]([^'"]+)['"]"""),
    _p(r"""\b(?:src|href|data-src|data-background|content)\s*=\s*["']([^"'{}\s]+)["']"""),
)

SCRIPT_ROUTE_PATTERNS: Tuple[TextPattern, ...] = (
    _p(r"""(?<![\w$])route\(\s*['"]([^'"]+)['"]\s*[,)]"""),
    _p(r"""router\.(?:push|replace)\(\s*\{\s*name:\s*['"]([^'"]+)['"]"""),
    _p(r"""useRouter\(\)\.(?:push|replace)\(\s*\{\s*name:\s*['"]([^'"]+)['"]"""),
    _p(r"""(?:\$inertia|Inertia|router)\.(?:visit|get|post|put|patch|delete)\(\s*['"]([^'"]+)['"]\s*[,)]""", hint="url"),
    _p(r""":?to="\{\s*name:\s*['"]([^'"]+)['"]"""),
    _p(r"""<Link\s+href="([^"'{}]+)\"""", hint="url"),
)


def _pattern_matches(
    pattern: TextPattern, text: str, echoes: Sequence[Tuple[int, int]]
) -> Iterator[re.Match]:
    if not pattern.echo_only:
        yield from pattern.regex.finditer(text)
        return
    for start, end in echoes:
        yield from pattern.regex.finditer(text, start, end)


def iter_matches(
    patterns: Sequence[TextPattern], text: str
) -> Iterator[Tuple[TextPattern, str, int, int]]:
    """Yield ``(pattern, key, start, end)`` for every capture in ``text``."""
    echoes = [(echo.start(1), echo.end(1)) for echo in _ECHO_BODY.finditer(text)]
    for pattern in patterns:
        for match in _pattern_matches(pattern, text, echoes):
            if not pattern.multi:
                key = match.group(1).strip()
                if key:
                    yield pattern, key, match.start(1), match.end(1)
                continue
            base = match.start(1)
            for item in _QUOTED.finditer(match.group(1)):
                yield pattern, item.group(1), base + item.start(1), base + item.end(1)


__all__ = [
    "BLADE_ASSET_PATTERNS",
    "BLADE_ROUTE_PATTERNS",
    "BLADE_TRANSLATION_PATTERNS",
    "BLADE_VIEW_PATTERNS",
    "SCRIPT_ROUTE_PATTERNS",
    "TextPattern",
    "iter_matches",
]
