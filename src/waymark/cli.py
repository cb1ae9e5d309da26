"""Waymark CLI: inspect a routes file.

Entry point registered as ``waymark`` in ``pyproject.toml``::

    waymark routes routes.json
    waymark match routes.json /article/42 --method POST
    waymark generate routes.json article_show id=42 ref=feed
"""

import argparse
import json
import sys

from waymark.exceptions import (
    MethodNotAllowed,
    RouteNotFound,
    RoutingError,
    UrlGenerationError,
)
from waymark.routing import Router


def _load(file: str) -> Router:
    """Load a routes file and compile every route so template errors surface here."""
    try:
        router = Router.from_file(file)
        router.warm_up(freeze=False)
    except (FileNotFoundError, RoutingError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    return router


def run_routes(args: argparse.Namespace) -> None:
    """Print a NAME / METHOD / PATH table in matching order."""
    router = _load(args.file)
    rows = [
        (name, ", ".join(route.methods) or "ANY", route.path)
        for name, route in router.routes.items()
    ]
    if not rows:
        print("No routes registered.")
        return

    max_name = max(4, *(len(r[0]) for r in rows))
    max_methods = max(6, *(len(r[1]) for r in rows))
    fmt = f"{{:<{max_name}}}  {{:<{max_methods}}}  {{}}"
    print(fmt.format("NAME", "METHOD", "PATH"))
    sep_len = max_name + max_methods + 4 + max(len(r[2]) for r in rows)
    print("-" * min(sep_len, 80))
    for row in rows:
        print(fmt.format(*row))


def run_match(args: argparse.Namespace) -> None:
    router = _load(args.file)
    try:
        parameters = router.match(args.path, args.method)
    except MethodNotAllowed as exc:
        print(f"405 {exc.detail}", file=sys.stderr)
        raise SystemExit(1) from exc
    except RouteNotFound as exc:
        print(f"404 {exc.detail}", file=sys.stderr)
        raise SystemExit(1) from exc
    print(json.dumps(parameters, indent=2, default=str))


def run_generate(args: argparse.Namespace) -> None:
    router = _load(args.file)
    parameters: dict[str, str] = {}
    for pair in args.params:
        key, sep, value = pair.partition("=")
        if not sep:
            print(f"Error: expected key=value, got {pair!r}", file=sys.stderr)
            raise SystemExit(2)
        parameters[key] = value
    try:
        print(router.generate(args.name, parameters))
    except UrlGenerationError as exc:
        print(f"Error: {exc.detail}", file=sys.stderr)
        raise SystemExit(1) from exc


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``waymark`` command."""
    parser = argparse.ArgumentParser(
        prog="waymark",
        description="Waymark: inspect, match and generate URLs from a routes file.",
    )
    subparsers = parser.add_subparsers(dest="command")

    routes_parser = subparsers.add_parser("routes", help="List routes in matching order")
    routes_parser.add_argument("file", help="Routes file (.json or .toml)")

    match_parser = subparsers.add_parser("match", help="Resolve a path to a route")
    match_parser.add_argument("file", help="Routes file (.json or .toml)")
    match_parser.add_argument("path", help="Request path, e.g. /article/42")
    match_parser.add_argument("--method", "-m", default="GET", help="HTTP method")

    generate_parser = subparsers.add_parser("generate", help="Build the URL of a named route")
    generate_parser.add_argument("file", help="Routes file (.json or .toml)")
    generate_parser.add_argument("name", help="Route name")
    generate_parser.add_argument(
        "params",
        nargs="*",
        help=(
            "Parameters as key=value. Values are passed as strings; an empty "
            "value (key=) counts as missing for a mandatory placeholder"
        ),
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        run_routes(args)
    elif args.command == "match":
        run_match(args)
    elif args.command == "generate":
        run_generate(args)
