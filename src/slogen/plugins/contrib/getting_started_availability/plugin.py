# plugin-module: getting_started_availability
"""
SLI plugin returning the error ratio of HTTP requests, taking 5xx and
429 responses as errors.

Options:
    job: Prometheus job of the service (required).
    filter: extra label matchers, e.g. ``{env="prod"}``.

Requires the ``owner`` and ``tier`` labels.
"""

import re

SLI_PLUGIN_VERSION = "prometheus/v1"
SLI_PLUGIN_ID = "getting_started_availability"

QUERY_TPL = """
sum(rate(http_request_duration_seconds_count{ %(filter)sjob="%(job)s",code=~"(5..|429)" }[{{.window}}]))
/
sum(rate(http_request_duration_seconds_count{ %(filter)sjob="%(job)s" }[{{.window}}]))"""

FILTER_PATTERN = re.compile(r'([^=]+="[^=,"]+",)+')


def validate_labels(labels, *required):
    for key in required:
        if not labels.get(key):
            raise ValueError(f"{key!r} label is required")


def sli_plugin(meta, labels, options):
    job = options.get("job")
    if job is None:
        raise ValueError("job options is required")

    validate_labels(labels, "owner", "tier")

    filter_ = options.get("filter", "")
    if filter_:
        filter_ = filter_.strip("{}").strip(",") + ","
        if not FILTER_PATTERN.search(filter_):
            raise ValueError(f"invalid prometheus filter: {filter_}")

    return QUERY_TPL % {"job": job, "filter": filter_}
