"""CLI entrypoints for laraindex commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List

from .config import ConfigError
from .facade import ProjectIndex
from .logging import configure_logging
from .models import ArtifactKind, SiteHandle


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the Laravel project root (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="laraindex",
        description="Index routes, translations, views and assets of a Laravel project.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log records to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan_parser = subparsers.add_parser(
        "scan",
        help="Index the project and print artifact counts.",
    )
    _add_verbose_option(scan_parser, suppress_default=True)
    _add_path_argument(scan_parser)

    routes_parser = subparsers.add_parser(
        "routes",
        help="List every indexed route.",
    )
    _add_verbose_option(routes_parser, suppress_default=True)
    _add_path_argument(routes_parser)
    routes_parser.add_argument(
        "--json",
        action="store_true",
        help="Emit routes as a JSON array.",
    )

    lookup_parser = subparsers.add_parser(
        "lookup",
        help="Classify a key and show where it is declared.",
    )
    _add_verbose_option(lookup_parser, suppress_default=True)
    lookup_parser.add_argument("path", help="Path to the Laravel project root.")
    lookup_parser.add_argument("key", help="Route name or path, translation key, view or asset.")

    usages_parser = subparsers.add_parser(
        "usages",
        help="List the reference sites of an artifact key.",
    )
    _add_verbose_option(usages_parser, suppress_default=True)
    usages_parser.add_argument("path", help="Path to the Laravel project root.")
    usages_parser.add_argument(
        "kind",
        choices=[kind.value for kind in ArtifactKind],
        help="Artifact kind of the key.",
    )
    usages_parser.add_argument("key", help="Canonical key to look up.")

    serve_parser = subparsers.add_parser(
        "serve",
        help="Serve index queries over HTTP.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    _add_path_argument(serve_parser)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for laraindex commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    if args.command == "serve":
        from .service import run_service

        run_service(args.path, host=args.host, port=args.port)
        return

    try:
        index = ProjectIndex.open(args.path)
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"{exc}\n")
    except ConfigError as exc:
        parser.exit(1, f"laraindex: invalid configuration: {exc}\n")

    if args.command == "scan":
        index.refresh()
        summary = index.summary()
        print(
            "Indexed {routes} routes, {translations} translations, {views} views, "
            "{assets} assets; {usages} usages across {files_scanned} files".format(**summary)
        )
    elif args.command == "routes":
        rows = _route_rows(index)
        if args.json:
            print(json.dumps(rows, indent=2))
        else:
            for row in rows:
                label = row["name"] or "-"
                print(f"{row['method']:<8} {row['path']:<40} {label:<30} {row['action'] or ''}".rstrip())
    elif args.command == "lookup":
        kind = index.classify(args.key)
        if kind is None:
            parser.exit(1, f"{args.key}: not found\n")
        print(f"{args.key}: {kind.value}")
        for site in index.find_declarations(kind, args.key):
            print(f"  declared at {_format_site(site)}")
        if kind is ArtifactKind.ROUTE:
            print(f"  {index.get_route_method(args.key)} {index.get_route_path(args.key)}")
        elif kind is ArtifactKind.TRANSLATION:
            print(f"  [{index.get_translation_locale(args.key)}] {index.get_translation_value(args.key)}")
        elif kind is ArtifactKind.VIEW:
            print(f"  {index.get_view_path(args.key)}")
        else:
            print(f"  {index.get_asset_type(args.key).value} {index.get_asset_path(args.key)}")
    elif args.command == "usages":
        usages = index.get_usages(ArtifactKind(args.kind), args.key)
        for usage in usages:
            print(f"{usage.file}:{usage.line_number + 1} {usage.usage_kind.value}")
        if not usages:
            print(f"No usages of {args.kind} '{args.key}'")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _route_rows(index: ProjectIndex) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for route in index.get_declared_routes():
        rows.append(
            {
                "name": route.name,
                "method": route.method,
                "path": route.path,
                "action": route.controller,
                "middleware": list(route.middleware),
                "domain": route.domain,
                "file": route.site.path,
                "line": route.site.line,
            }
        )
    return rows


def _format_site(site: SiteHandle) -> str:
    return f"{site.path}:{site.line + 1}"


if __name__ == "__main__":
    main(sys.argv[1:])
