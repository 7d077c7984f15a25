"""Tests for sandboxed plugin evaluation."""

import re

import pytest

from slogen.core.errors import PluginLoadError
from slogen.plugins.sandbox import Sandbox
from slogen.recording_rules.models import Rule
from slogen.slos.alerts import AlertSeverity


def evaluate(source, name="test"):
    sandbox = Sandbox(name)
    sandbox.evaluate(source)
    return sandbox


class TestSandboxEvaluation:
    """Test what plugin sources can do."""

    def test_top_level_symbols(self):
        """Test declared symbols can be looked up."""
        sandbox = evaluate('PLUGIN_ID = "x"\ndef f(a, b):\n    return a + b\n')
        assert sandbox.lookup("PLUGIN_ID") == "x"
        assert sandbox.lookup("f")(1, 2) == 3

    def test_missing_symbol(self):
        """Test looking up an undeclared symbol."""
        sandbox = evaluate("X = 1")
        with pytest.raises(PluginLoadError, match="symbol 'Y' not found in plugin 'test'"):
            sandbox.lookup("Y")

    def test_classes(self):
        """Test plugins can define and instantiate classes."""
        source = (
            "class Base:\n"
            "    def __init__(self, start):\n"
            "        self.start = start\n"
            "    def value(self):\n"
            "        return self.start\n"
            "class Child(Base):\n"
            "    def value(self):\n"
            "        return super().value() + 1\n"
            "VALUE = Child(1).value()\n"
        )
        assert evaluate(source).lookup("VALUE") == 2

    def test_allowed_imports(self):
        """Test the allowed modules and host packages can be imported."""
        source = (
            "import re\n"
            "import json\n"
            "from slogen import conventions, promql\n"
            "from slogen.model import Rule\n"
            "PATTERN = re.compile('a+')\n"
            "DATA = json.loads('{\"a\": 1}')\n"
            "METRIC = conventions.PROM_META_SLO_INFO_METRIC\n"
            "FILTER = promql.labels_to_prom_filter({'a': '1'})\n"
            "RULE = Rule(record='r', expr='x')\n"
        )
        sandbox = evaluate(source)

        assert sandbox.lookup("PATTERN").match("aaa")
        assert sandbox.lookup("DATA") == {"a": 1}
        assert sandbox.lookup("METRIC") == "sloth_slo_info"
        assert sandbox.lookup("FILTER") == '{a="1"}'
        assert isinstance(sandbox.lookup("RULE"), Rule)

    def test_dotted_import(self):
        """Test importing a dotted module binds the root package."""
        sandbox = evaluate("import slogen.promql\nOUT = slogen.promql.format_float(0.5)\n")
        assert sandbox.lookup("OUT") == "0.5"

    def test_print_is_harmless(self):
        """Test print is routed to the logger."""
        evaluate("print('hello', 1)")

    def test_syntax_error(self):
        """Test invalid Python is reported as a load error."""
        with pytest.raises(PluginLoadError, match="could not evaluate plugin source code"):
            evaluate("def broken(:\n")

    def test_runtime_error(self):
        """Test errors raised while executing the module."""
        with pytest.raises(PluginLoadError, match="ZeroDivisionError"):
            evaluate("X = 1 / 0")


class TestSandboxRestrictions:
    """Test what plugin sources can't reach."""

    @pytest.mark.parametrize(
        "source",
        [
            "import os",
            "import sys",
            "import subprocess",
            "from os import path",
            "import slogen.core.errors",
            "from slogen.plugins import sandbox",
        ],
    )
    def test_disallowed_imports(self, source):
        """Test modules outside the allowed set are rejected."""
        with pytest.raises(PluginLoadError, match="is not allowed"):
            evaluate(source)

    def test_relative_import(self):
        """Test relative imports are rejected."""
        with pytest.raises(PluginLoadError, match="relative imports"):
            evaluate("from . import x")

    def test_star_import(self):
        """Test star imports are rejected."""
        with pytest.raises(PluginLoadError, match="star imports"):
            evaluate("from re import *")

    @pytest.mark.parametrize("name", ["open", "eval", "exec", "compile", "getattr", "globals", "vars", "input"])
    def test_unsafe_builtins_missing(self, name):
        """Test unsafe builtins are not available."""
        with pytest.raises(PluginLoadError, match="NameError"):
            evaluate(f"X = {name}")

    @pytest.mark.parametrize(
        "source",
        [
            "X = ().__class__",
            "X = (1).__class__.__subclasses__()",
            "X = __import__('os')",
            "X = __builtins__",
            "def f():\n    pass\nX = f.__globals__",
        ],
    )
    def test_dunder_access(self, source):
        """Test dunder names and attributes are rejected."""
        with pytest.raises(PluginLoadError, match="is not allowed"):
            evaluate(source)

    @pytest.mark.parametrize(
        "source",
        [
            "g = (x for x in [1])\nX = g.gi_frame",
            "X = '{0.__class__}'.format(1)",
            "X = '{a}'.format_map({'a': 1})",
            "X = str.mro()",
        ],
    )
    def test_forbidden_attributes(self, source):
        """Test introspection attributes are rejected."""
        with pytest.raises(PluginLoadError, match="is not allowed"):
            evaluate(source)

    def test_unknown_symbol_from_allowed_package(self):
        """Test importing a host module not exposed under an allowed package."""
        with pytest.raises(PluginLoadError, match="could not evaluate plugin source code"):
            evaluate("from slogen import errors")

    @pytest.mark.parametrize("name", ["app", "logging", "plugins", "slos"])
    def test_host_modules_not_reachable(self, name):
        """Test host submodules of allowed packages can't be imported."""
        with pytest.raises(PluginLoadError, match="cannot import"):
            evaluate(f"from slogen import {name}")


class TestSandboxIsolation:
    """Test sandboxes don't share state."""

    def test_globals_not_shared(self):
        """Test symbols of one sandbox are invisible to another."""
        evaluate("LEAK = 1")
        other = evaluate("X = 1")
        with pytest.raises(PluginLoadError):
            other.lookup("LEAK")

    def test_module_patching_is_local(self):
        """Test rebinding a module attribute only changes the sandbox copy."""
        evaluate("import re\nre.compile = None\n")
        other = evaluate("import re\nOK = re.compile('a') is not None\n")

        assert other.lookup("OK") is True
        assert re.compile("a") is not None

    def test_model_patching_is_local(self):
        """Test plugins can't patch the host model classes."""
        evaluate("from slogen import model\nmodel.Rule.to_dict = None\nmodel.Rule = None\n")
        other = evaluate("from slogen import model\nRULE = model.Rule(record='r', expr='x')\n")

        assert other.lookup("RULE").to_dict() == {"record": "r", "expr": "x"}
        assert Rule(record="r", expr="x").to_dict() == {"record": "r", "expr": "x"}

    @pytest.mark.parametrize(
        "source",
        [
            'from slogen import model\nmodel.AlertSeverity.PAGE._value_ = "broken"\n',
            "from slogen import model\nX = model.AlertSeverity._value2member_map_\n",
            "class A:\n    pass\nA()._private = 1\n",
        ],
    )
    def test_private_attributes_rejected(self, source):
        """Test underscore-prefixed attributes can't be read or written."""
        with pytest.raises(PluginLoadError, match="is not allowed"):
            evaluate(source)

        assert AlertSeverity.PAGE.value == "page"
        assert AlertSeverity("page") is AlertSeverity.PAGE

    def test_severities_are_read_only(self):
        """Test alert severities are plain string constants."""
        with pytest.raises(PluginLoadError, match="AttributeError"):
            evaluate('from slogen import model\nmodel.AlertSeverity.PAGE = "broken"\n')

        sandbox = evaluate("from slogen import model\nPAGE = model.AlertSeverity.PAGE\n")
        assert sandbox.lookup("PAGE") == "page"
        assert AlertSeverity.PAGE.value == "page"

    def test_shared_classes_not_exposed(self):
        """Test host classes shared with the stdlib aren't importable."""
        with pytest.raises(PluginLoadError, match="cannot import"):
            evaluate("from string import Template")


class TestExposedSymbols:
    """Test enumerating the sandbox surface."""

    def test_builtins(self):
        """Test the builtins list excludes unsafe functions."""
        symbols = Sandbox.exposed_symbols()
        assert "len" in symbols["builtins"]
        assert "print" in symbols["builtins"]
        for name in ("open", "eval", "exec", "getattr", "setattr", "globals"):
            assert name not in symbols["builtins"]

    def test_modules(self):
        """Test every importable module is listed with its symbols."""
        symbols = Sandbox.exposed_symbols()
        assert "compile" in symbols["re"]
        assert "loads" in symbols["json"]
        assert "labels_to_prom_filter" in symbols["slogen.promql"]
        assert "render_template" in symbols["slogen.template"]
        assert "get_slo_id_prom_labels" in symbols["slogen.conventions"]
        assert "Rule" in symbols["slogen.model"]
        assert "validate_slo" in symbols["slogen.validation"]
        assert "MetricsQLDialectValidator" in symbols["slogen.validation"]
        assert "Template" not in symbols["string"]
        assert "os" not in symbols
