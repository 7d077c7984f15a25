"""
SLO definition validation.

Checks the SLO model before any rule is generated: names, objective,
labels, SLI queries, alert metadata and the plugin chain.

Backend specific rules (label names, query language) live in dialect
validators:

- ``PromQLDialectValidator``: Prometheus label names, queries parsed
  with ``promql_parser``.
- ``MetricsQLDialectValidator``: VictoriaMetrics, any UTF-8 label name
  and a structural check of the query, as MetricsQL extends PromQL.
"""

from __future__ import annotations

import re
from typing import Mapping

import promql_parser

from slogen.conventions import NAME_REGEXP, TPL_SLI_QUERY_WINDOW_VAR_NAME, TPL_WINDOW_REGEXP
from slogen.core.errors import TemplateError, ValidationError
from slogen.slos.models import SLO, AlertMeta
from slogen.template import render_template

__all__ = ["MetricsQLDialectValidator", "PromQLDialectValidator", "validate_slo"]

LABEL_NAME_PATTERN = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")
METRIC_NAME_LABEL = "__name__"

# Fake data used to render query templates before checking them.
_QUERY_TPL_FAKE_DATA = {TPL_SLI_QUERY_WINDOW_VAR_NAME: "1m"}

_BRACKET_PAIRS = {")": "(", "]": "[", "}": "{"}


def _is_utf8(value: str) -> bool:
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def check_query_structure(expr: str) -> None:
    """Check brackets are balanced and strings terminated, ignoring quoted text."""
    stack: list[str] = []
    quote: str | None = None
    escaped = False
    for ch in expr:
        if quote:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            continue
        if ch in "\"'`":
            quote = ch
        elif ch in "([{":
            stack.append(ch)
        elif ch in _BRACKET_PAIRS:
            if not stack or stack.pop() != _BRACKET_PAIRS[ch]:
                raise ValidationError(f"unbalanced {ch!r} in query expression")

    if quote:
        raise ValidationError("unterminated string in query expression")
    if stack:
        raise ValidationError(f"unclosed {stack[-1]!r} in query expression")


class PromQLDialectValidator:
    """Validates labels, annotations and expressions for Prometheus."""

    def validate_label_key(self, key: str) -> None:
        if key == METRIC_NAME_LABEL:
            raise ValidationError(f"the label key {METRIC_NAME_LABEL!r} is not allowed")
        if not LABEL_NAME_PATTERN.match(key):
            raise ValidationError(f"invalid label key {key!r}")

    def validate_label_value(self, value: str) -> None:
        if not isinstance(value, str):
            raise ValidationError(f"invalid label value {value!r}")
        if not value:
            raise ValidationError("the label value is required")
        if not _is_utf8(value):
            raise ValidationError(f"invalid label value {value!r}: not valid UTF-8")

    def validate_annotation_key(self, key: str) -> None:
        if not LABEL_NAME_PATTERN.match(key):
            raise ValidationError(f"invalid annotation key {key!r}")

    def validate_annotation_value(self, value: str) -> None:
        if not isinstance(value, str):
            raise ValidationError(f"invalid annotation value {value!r}")
        if not value:
            raise ValidationError("the annotation value is required")

    def validate_query_expression(self, query: str) -> None:
        """Render the query template with fake data and check the resulting expression."""
        try:
            expr = render_template(query, _QUERY_TPL_FAKE_DATA, name="query")
        except TemplateError as e:
            raise ValidationError(e.message) from e

        if not expr.strip():
            raise ValidationError("query expression is empty")

        check_query_structure(expr)
        self.parse_expression(expr)

    def parse_expression(self, expr: str) -> None:
        try:
            promql_parser.parse(expr)
        except ValueError as e:
            raise ValidationError(f"invalid PromQL expression: {e}") from e


class MetricsQLDialectValidator(PromQLDialectValidator):
    """
    Validates labels, annotations and expressions for VictoriaMetrics.

    Label and annotation names can be any UTF-8 string. Queries are only
    checked structurally: MetricsQL accepts expressions a PromQL parser
    rejects (``WITH`` templates, optional range windows, extra functions).
    """

    def validate_label_key(self, key: str) -> None:
        if key == METRIC_NAME_LABEL:
            raise ValidationError(f"the label key {METRIC_NAME_LABEL!r} is not allowed")
        if not key or not _is_utf8(key):
            raise ValidationError(f"the label key {key!r} is not valid")

    def validate_annotation_key(self, key: str) -> None:
        if not key or not _is_utf8(key):
            raise ValidationError(f"the annotation key {key!r} is not valid")

    def parse_expression(self, expr: str) -> None:
        pass


def _validate_name(name: str) -> None:
    if not name:
        raise ValidationError("is required")
    if not NAME_REGEXP.match(name):
        raise ValidationError(
            "name must start and end with an alphanumeric and can only contain "
            "alphanumeric, '.', '_', and '-'"
        )


def _validate_labels(labels: Mapping[str, str], dialect: PromQLDialectValidator) -> None:
    for k, v in labels.items():
        dialect.validate_label_key(k)
        dialect.validate_label_value(v)


def _validate_query_template(query: str, dialect: PromQLDialectValidator) -> None:
    if not query:
        raise ValidationError("query template is required")
    if not TPL_WINDOW_REGEXP.search(query):
        raise ValidationError("template must contain the {{ .window }} variable")
    dialect.validate_query_expression(query)


def _validate_sli(slo: SLO, dialect: PromQLDialectValidator) -> None:
    sli = slo.sli
    if sli.raw is None and sli.events is None:
        raise ValidationError("at least one SLI type is required")
    if sli.raw is not None and sli.events is not None:
        raise ValidationError("only one SLI type is allowed")

    if sli.events is not None:
        if sli.events.error_query == sli.events.total_query:
            raise ValidationError("both error and total queries can't be the same")
        _wrap("sli error query", _validate_query_template, sli.events.error_query, dialect)
        _wrap("sli total query", _validate_query_template, sli.events.total_query, dialect)
    else:
        _wrap("sli raw query", _validate_query_template, sli.raw.error_ratio_query, dialect)


def _validate_alert(alert: AlertMeta, dialect: PromQLDialectValidator) -> None:
    if alert.disable:
        return
    if not alert.name:
        raise ValidationError("alert name is required")
    _validate_labels(alert.labels, dialect)
    for k, v in alert.annotations.items():
        dialect.validate_annotation_key(k)
        dialect.validate_annotation_value(v)


def _validate_plugins(slo: SLO) -> None:
    if slo.plugins.override and not slo.plugins.plugins:
        raise ValidationError("override default plugins is set but no plugins are defined")
    for p in slo.plugins.plugins:
        if not p.id:
            raise ValidationError("plugin ID is required")


def _wrap(what: str, func, *args) -> None:
    try:
        func(*args)
    except ValidationError as e:
        raise ValidationError(f"{what}: {e.message}") from e


def validate_slo(slo: SLO, dialect: PromQLDialectValidator | None = None) -> None:
    """
    Validate an SLO.

    Raises:
        ValidationError: describing the first problem found.
    """
    dialect = dialect or PromQLDialectValidator()

    _wrap("invalid SLO ID", _validate_name, slo.id)
    _wrap("invalid SLO name", _validate_name, slo.name)
    _wrap("invalid SLO service", _validate_name, slo.service)

    if not slo.time_window or slo.time_window.total_seconds() <= 0:
        raise ValidationError("time window is required")

    if slo.objective <= 0 or slo.objective > 100:
        raise ValidationError("objective must >0 and <=100")

    _wrap("invalid SLO labels", _validate_labels, slo.labels, dialect)
    _wrap("invalid SLI", _validate_sli, slo, dialect)
    _wrap("invalid page alert", _validate_alert, slo.page_alert_meta, dialect)
    _wrap("invalid ticket alert", _validate_alert, slo.ticket_alert_meta, dialect)
    _wrap("invalid plugins", _validate_plugins, slo)
