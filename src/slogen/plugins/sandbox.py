"""
Sandboxed evaluation of plugin source code.

Each ``Sandbox`` is a brand-new, isolated evaluation context:

- Restricted builtins (no ``open``, ``eval``, ``exec``, ``getattr``...).
- A restricted ``__import__`` resolving only a fixed set of modules,
  exposed as attribute-filtered proxies built per sandbox, so a plugin
  rebinding ``re.compile`` only changes its own copy. Host classes are
  never exposed directly: models are reached through constructor
  functions and enums as named tuples of their values.
- A static check rejecting dunder names, underscore-prefixed
  attributes and the frame/generator introspection attributes that
  lead back to host globals.

Nothing in the sandbox gives access to the filesystem, network,
processes or environment.
"""

from __future__ import annotations

import ast
import builtins
import collections
import copy
import json
import math
import re
import string
import types
import typing
from typing import Any, Callable, Dict, Iterable, Mapping

import structlog

from slogen import conventions, promql
from slogen import template as templating
from slogen.core.errors import PluginLoadError

logger = structlog.get_logger()

# Restricted builtins for sandbox
SAFE_BUILTINS = frozenset({
    "abs", "all", "any", "bool", "bytes", "callable", "chr",
    "dict", "divmod", "enumerate", "filter",
    "float", "frozenset", "hash",
    "hex", "int", "isinstance", "issubclass",
    "iter", "len", "list", "map", "max", "min",
    "next", "oct", "ord", "pow",
    "range", "repr", "reversed", "round",
    "set", "slice", "sorted", "str", "sum",
    "tuple", "zip",
    # Class definitions
    "__build_class__", "object", "super", "staticmethod", "classmethod", "property",
    # Exceptions
    "Exception", "ValueError", "TypeError",
    "KeyError", "IndexError", "RuntimeError",
    "NotImplementedError", "StopIteration",
    "AttributeError", "ImportError", "LookupError", "ArithmeticError",
    "ZeroDivisionError", "OverflowError", "AssertionError",
    # Constants
    "True", "False", "None",
})

# Attributes that walk from objects back to frames, code and host globals.
FORBIDDEN_ATTRIBUTES = frozenset({
    "gi_frame", "gi_code", "gi_yieldfrom",
    "cr_frame", "cr_code", "cr_await",
    "ag_frame", "ag_code", "ag_await",
    "f_back", "f_globals", "f_locals", "f_builtins", "f_code",
    "tb_frame", "tb_next",
    "co_code", "func_globals",
    "mro",
    # str.format can traverse attributes through field names.
    "format", "format_map",
})

_RE_SYMBOLS = (
    "compile", "escape", "findall", "finditer", "fullmatch", "match", "search",
    "split", "sub", "subn", "IGNORECASE", "MULTILINE", "DOTALL", "VERBOSE",
    "ASCII", "I", "M", "S", "X", "A",
)
_JSON_SYMBOLS = ("dumps", "loads")
_STRING_SYMBOLS = (
    "ascii_letters", "ascii_lowercase", "ascii_uppercase", "digits", "hexdigits",
    "octdigits", "punctuation", "printable", "whitespace", "capwords",
)
_COPY_SYMBOLS = ("copy", "deepcopy")
_TYPING_SYMBOLS = (
    "Any", "Callable", "Dict", "Iterable", "List", "Mapping", "Optional",
    "Sequence", "Set", "Tuple", "Union",
)


def _public(module: types.ModuleType) -> tuple[str, ...]:
    return tuple(name for name in dir(module) if not name.startswith("_"))


def _constructor(cls: type) -> Callable[..., Any]:
    """Expose a host class as a constructor function, so plugins can't patch the class."""

    def build(*args: Any, **kwargs: Any) -> Any:
        return cls(*args, **kwargs)

    build.__name__ = cls.__name__
    build.__qualname__ = cls.__name__
    build.__doc__ = cls.__doc__
    return build


def _severities(enum: type) -> Any:
    """Expose an enum as a read-only namespace of its string values."""
    members = list(enum)
    namespace = collections.namedtuple(enum.__name__, [m.name for m in members])
    return namespace(*(m.value for m in members))


def _model_symbols() -> Dict[str, Any]:
    # Imported lazily: the plugin API imports the models, the models don't import us.
    from slogen.plugins import api
    from slogen.recording_rules import models as rule_models
    from slogen.slos import alerts, models

    symbols: Dict[str, Any] = {
        name: _constructor(getattr(module, name))
        for module, names in (
            (rule_models, ("Rule", "RuleGroup", "SLORules")),
            (models, ("SLO", "SLI", "SLIRaw", "SLIEvents", "AlertMeta", "Info")),
            (alerts, ("MWMBAlert", "MWMBAlertGroup")),
        )
        for name in names
    }
    symbols["AlertSeverity"] = _severities(alerts.AlertSeverity)
    symbols["SLO_PLUGIN_VERSION"] = api.SLO_PLUGIN_VERSION
    symbols["SLI_PLUGIN_VERSION"] = api.SLI_PLUGIN_VERSION
    symbols["SLI_PLUGIN_META_SERVICE"] = api.SLI_PLUGIN_META_SERVICE
    symbols["SLI_PLUGIN_META_SLO"] = api.SLI_PLUGIN_META_SLO
    symbols["SLI_PLUGIN_META_OBJECTIVE"] = api.SLI_PLUGIN_META_OBJECTIVE
    return symbols


def _validation_symbols() -> Dict[str, Any]:
    from slogen.validation import slo

    return {
        "validate_slo": slo.validate_slo,
        "PromQLDialectValidator": _constructor(slo.PromQLDialectValidator),
        "MetricsQLDialectValidator": _constructor(slo.MetricsQLDialectValidator),
    }


def _module_sources() -> Dict[str, Callable[[], Dict[str, Any]]]:
    """The fixed set of importable modules and the symbols each one exposes."""

    def from_module(module: Any, names: Iterable[str]) -> Callable[[], Dict[str, Any]]:
        return lambda: {name: getattr(module, name) for name in names if hasattr(module, name)}

    return {
        "re": from_module(re, _RE_SYMBOLS),
        "json": from_module(json, _JSON_SYMBOLS),
        "math": from_module(math, _public(math)),
        "string": from_module(string, _STRING_SYMBOLS),
        "copy": from_module(copy, _COPY_SYMBOLS),
        "typing": from_module(typing, _TYPING_SYMBOLS),
        "slogen.conventions": from_module(conventions, conventions.__all__),
        "slogen.promql": from_module(promql, promql.__all__),
        "slogen.template": from_module(templating, templating.__all__),
        "slogen.model": _model_symbols,
        "slogen.validation": _validation_symbols,
    }


class _SourceGuard(ast.NodeVisitor):
    """Rejects constructs that could escape the sandbox."""

    def __init__(self, allowed_modules: Iterable[str]):
        self.allowed_modules = set(allowed_modules)

    def visit_Attribute(self, node: ast.Attribute) -> None:
        if node.attr.startswith("_") or node.attr in FORBIDDEN_ATTRIBUTES:
            raise PluginLoadError(f"line {node.lineno}: access to attribute {node.attr!r} is not allowed")
        self.generic_visit(node)

    def visit_Name(self, node: ast.Name) -> None:
        if node.id.startswith("__"):
            raise PluginLoadError(f"line {node.lineno}: use of name {node.id!r} is not allowed")
        self.generic_visit(node)

    def visit_Import(self, node: ast.Import) -> None:
        for alias in node.names:
            self._check_module(alias.name, node.lineno)

    def visit_ImportFrom(self, node: ast.ImportFrom) -> None:
        if node.level:
            raise PluginLoadError(f"line {node.lineno}: relative imports are not allowed")
        module = node.module or ""
        for alias in node.names:
            if alias.name == "*":
                raise PluginLoadError(f"line {node.lineno}: star imports are not allowed")
            full = f"{module}.{alias.name}"
            if full in self.allowed_modules:
                continue
            self._check_module(module, node.lineno)

    def _check_module(self, name: str, lineno: int) -> None:
        if name not in self.allowed_modules:
            raise PluginLoadError(f"line {lineno}: import of {name!r} is not allowed")


class Sandbox:
    """
    A single-use isolated evaluation context for one plugin source.

    Example:
        sandbox = Sandbox("availability")
        namespace = sandbox.evaluate(source)
        plugin_id = sandbox.lookup("SLI_PLUGIN_ID")
    """

    def __init__(self, module_name: str):
        self.module_name = module_name
        self._modules = self._build_modules()
        self._namespace = self._build_namespace()

    @staticmethod
    def exposed_symbols() -> Dict[str, list[str]]:
        """Enumerate everything a plugin can reach: builtins and importable modules."""
        symbols = {"builtins": sorted(SAFE_BUILTINS | {"print", "__import__"})}
        for name, source in _module_sources().items():
            symbols[name] = sorted(source())
        return symbols

    def evaluate(self, source: str, filename: str = "<plugin>") -> Mapping[str, Any]:
        """Statically check, compile and execute the source in this sandbox."""
        try:
            tree = ast.parse(source, filename=filename, mode="exec")
        except SyntaxError as e:
            raise PluginLoadError(f"could not evaluate plugin source code: {e}") from e

        _SourceGuard(self._modules).visit(tree)

        try:
            code = compile(tree, filename, "exec")
            exec(code, self._namespace)
        except PluginLoadError:
            raise
        except Exception as e:
            raise PluginLoadError(f"could not evaluate plugin source code: {type(e).__name__}: {e}") from e

        return types.MappingProxyType(self._namespace)

    def lookup(self, name: str) -> Any:
        """Resolve a top-level symbol declared by the evaluated source."""
        if name not in self._namespace:
            raise PluginLoadError(f"symbol {name!r} not found in plugin {self.module_name!r}")
        return self._namespace[name]

    def _build_modules(self) -> Dict[str, types.ModuleType]:
        modules: Dict[str, types.ModuleType] = {}
        for name, source in _module_sources().items():
            proxy = types.ModuleType(name)
            for symbol, value in source().items():
                setattr(proxy, symbol, value)
            modules[name] = proxy

        # Parent packages for dotted names (``from slogen import conventions``).
        for name in list(modules):
            parts = name.split(".")
            for i in range(1, len(parts)):
                parent_name = ".".join(parts[:i])
                parent = modules.setdefault(parent_name, types.ModuleType(parent_name))
                setattr(parent, parts[i], modules[".".join(parts[: i + 1])])
        return modules

    def _build_namespace(self) -> Dict[str, Any]:
        safe_builtins = {
            name: getattr(builtins, name) for name in SAFE_BUILTINS if hasattr(builtins, name)
        }
        safe_builtins["__import__"] = self._import
        safe_builtins["print"] = self._print

        return {
            "__builtins__": safe_builtins,
            "__name__": self.module_name,
        }

    def _import(
        self,
        name: str,
        globals: Mapping[str, Any] | None = None,
        locals: Mapping[str, Any] | None = None,
        fromlist: Iterable[str] | None = (),
        level: int = 0,
    ) -> types.ModuleType:
        if level != 0:
            raise ImportError("relative imports are not allowed")
        if name not in self._modules:
            raise ImportError(f"import of {name!r} is not allowed")
        if fromlist:
            module = self._modules[name]
            # Checked here: a failed ``from x import y`` falls back to sys.modules["x.y"].
            missing = [symbol for symbol in fromlist if not hasattr(module, symbol)]
            if missing:
                raise ImportError(f"cannot import {', '.join(missing)} from {name!r}")
            return module
        return self._modules[name.split(".")[0]]

    def _print(self, *args: Any, **kwargs: Any) -> None:
        logger.debug("plugin_print", module=self.module_name, message=" ".join(str(a) for a in args))
