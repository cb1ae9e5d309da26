"""
Route definition and path-template compiler.

A route couples a path template such as ``/article/{id}`` with its
defaults, per-placeholder requirements and allowed HTTP methods. The
template is compiled lazily into a :class:`CompiledRoute`, an immutable
value holding the anchored regex and the ordered placeholder names.
"""

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Pattern

from waymark.exceptions import RouteCompilationError, RoutingError
from waymark.types import CONTROLLER_KEY, Controller, ParamValue, Parameters


# Placeholder token: {name}, name being a Python-style identifier
PLACEHOLDER_PATTERN: Pattern[str] = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")

# Constraint used when a placeholder has no requirement
DEFAULT_REQUIREMENT: str = r"[^/]+"


@dataclass(frozen=True, slots=True)
class CompiledRoute:
    """Result of compiling a path template."""

    pattern: str
    regex: re.Pattern[str]
    variables: tuple[str, ...]

    def match(self, path_info: str) -> dict[str, str] | None:
        """Return the captures that participated in a full match."""
        match = self.regex.fullmatch(path_info)
        if match is None:
            return None
        return {
            name: value
            for name, value in match.groupdict().items()
            if value is not None
        }


def compile_path(
    path: str,
    defaults: Mapping[str, Any],
    requirements: Mapping[str, str],
) -> CompiledRoute:
    """
    Compile a path template into an anchored regex.

    Mandatory placeholders become ``(?P<name>constraint)``. Optional ones
    (those with a default) become ``(?:/(?P<name>constraint))?`` and take
    the ``/`` separator in front of them along, so ``/blog/{page}``
    matches both ``/blog`` and ``/blog/2``.

    Raises:
        RouteCompilationError: On a repeated placeholder name or an
            invalid requirement regex.
    """
    parts: list[str] = []
    variables: list[str] = []
    position = 0

    for token in PLACEHOLDER_PATTERN.finditer(path):
        name = token.group(1)
        if name in variables:
            raise RouteCompilationError(
                f'Placeholder "{name}" appears more than once in "{path}"'
            )
        variables.append(name)

        literal = path[position:token.start()]
        requirement = requirements.get(name, DEFAULT_REQUIREMENT)

        if name in defaults:
            separator = ""
            # The root slash stays literal, request paths are never empty
            if literal.endswith("/") and (position > 0 or literal != "/"):
                literal = literal[:-1]
                separator = "/"
            parts.append(re.escape(literal))
            parts.append(f"(?:{separator}(?P<{name}>{requirement}))?")
        else:
            parts.append(re.escape(literal))
            parts.append(f"(?P<{name}>{requirement})")

        position = token.end()

    parts.append(re.escape(path[position:]))
    pattern = "^" + "".join(parts) + "$"

    try:
        regex = re.compile(pattern)
    except re.error as exc:
        raise RouteCompilationError(
            f'Cannot compile route "{path}": {exc}'
        ) from exc

    return CompiledRoute(pattern=pattern, regex=regex, variables=tuple(variables))


def _normalize_methods(methods: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(m.upper() for m in methods))


class Route:
    """
    A single path template plus its defaults, requirements and methods.

    Usage:
        route = Route(
            "/article/{id}",
            defaults={"_controller": Controller(show_article)},
            requirements={"id": r"\\d+"},
            methods=["GET"],
        )
        route.match("/article/42")  # {"_controller": ..., "id": "42"}
    """

    __slots__ = ("_path", "_defaults", "_requirements", "_methods", "_compiled", "_frozen")

    def __init__(
        self,
        path: str,
        defaults: Mapping[str, ParamValue] | None = None,
        requirements: Mapping[str, str] | None = None,
        methods: Iterable[str] | None = None,
    ) -> None:
        self._path = path
        self._defaults: Parameters = dict(defaults or {})
        self._requirements: dict[str, str] = dict(requirements or {})
        self._methods = _normalize_methods(methods or ())
        self._compiled: CompiledRoute | None = None
        self._frozen = False

    def __repr__(self) -> str:
        return f"Route(path={self._path!r}, methods={list(self._methods)!r})"

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def path(self) -> str:
        return self._path

    @property
    def defaults(self) -> Parameters:
        return dict(self._defaults)

    @property
    def requirements(self) -> dict[str, str]:
        return dict(self._requirements)

    @property
    def methods(self) -> tuple[str, ...]:
        """Allowed methods, upper-cased. Empty means every method."""
        return self._methods

    @property
    def variables(self) -> tuple[str, ...]:
        """Placeholder names in order of appearance."""
        return self.compile().variables

    @property
    def frozen(self) -> bool:
        return self._frozen

    def has_default(self, name: str) -> bool:
        return name in self._defaults

    def get_default(self, name: str) -> ParamValue:
        return self._defaults.get(name)

    def get_requirement(self, name: str) -> str | None:
        return self._requirements.get(name)

    def supports_method(self, method: str) -> bool:
        if not self._methods:
            return True
        return method.upper() in self._methods

    # ------------------------------------------------------------------
    # Compilation and matching
    # ------------------------------------------------------------------

    def compile(self) -> CompiledRoute:
        """Compile the path template, reusing the cached result."""
        compiled = self._compiled
        if compiled is None:
            compiled = compile_path(self._path, self._defaults, self._requirements)
            self._compiled = compiled
        return compiled

    def match_path(self, path_info: str) -> Parameters | None:
        """
        Match a path against the template, ignoring method restrictions.
        Returns the parameters if matched, None otherwise.
        """
        captured = self.compile().match(path_info)
        if captured is None:
            return None
        parameters = dict(self._defaults)
        parameters.update(captured)
        return parameters

    def match(self, path_info: str, method: str = "GET") -> Parameters | None:
        """
        Match a path and method against this route.

        Captured values take precedence over defaults; defaults only fill
        placeholders that matched nothing.
        """
        if not self.supports_method(method):
            return None
        return self.match_path(path_info)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def _ensure_mutable(self) -> None:
        if self._frozen:
            raise RoutingError(f"Route {self._path!r} is frozen and cannot be modified.")

    def set_path(self, path: str) -> "Route":
        self._ensure_mutable()
        self._path = path
        self._compiled = None
        return self

    def set_defaults(self, defaults: Mapping[str, ParamValue]) -> "Route":
        self._ensure_mutable()
        self._defaults = dict(defaults)
        self._compiled = None
        return self

    def add_default(self, name: str, value: ParamValue) -> "Route":
        self._ensure_mutable()
        self._defaults[name] = value
        self._compiled = None
        return self

    def set_requirements(self, requirements: Mapping[str, str]) -> "Route":
        self._ensure_mutable()
        self._requirements = dict(requirements)
        self._compiled = None
        return self

    def add_requirement(self, name: str, regex: str) -> "Route":
        self._ensure_mutable()
        self._requirements[name] = regex
        self._compiled = None
        return self

    def set_methods(self, methods: Iterable[str]) -> "Route":
        # Method checks don't depend on the compiled pattern
        self._ensure_mutable()
        self._methods = _normalize_methods(methods)
        return self

    def freeze(self) -> "Route":
        """Compile eagerly and refuse any further modification."""
        self.compile()
        self._frozen = True
        return self

    # ------------------------------------------------------------------
    # Declarative form
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Export in the shape :meth:`from_dict` reads; controllers become import strings."""
        return {
            "path": self._path,
            "defaults": {
                name: str(value) if isinstance(value, Controller) else value
                for name, value in self._defaults.items()
            },
            "requirements": dict(self._requirements),
            "methods": list(self._methods),
        }

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> "Route":
        """Build a route from a ``{path, defaults?, requirements?, methods?}`` record."""
        if "path" not in config:
            raise RoutingError('A route definition must have a "path" key.')
        defaults = dict(config.get("defaults") or {})
        if isinstance(defaults.get(CONTROLLER_KEY), str):
            defaults[CONTROLLER_KEY] = Controller(defaults[CONTROLLER_KEY])
        return cls(
            config["path"],
            defaults=defaults,
            requirements=config.get("requirements"),
            methods=config.get("methods"),
        )
