"""Fetch quality gate and issue metrics for a scan.

Functions:
    build_params(ctx)            -> dict      query for /api/measures/component
    find_measure(measures, key)  -> str
    parse_measures(data)         -> Measures
    fetch_measures(client, ctx)  -> Measures
"""

import logging
from typing import Any

from sonar_notify.client import SonarClient
from sonar_notify.models import METRIC_KEYS, Measures, ScanContext

logger = logging.getLogger(__name__)

MEASURES_ENDPOINT = "/api/measures/component"


def build_params(ctx: ScanContext) -> dict:
    """Query parameters for the scanned project, qualified by PR or branch."""
    params = {
        "additionalFields": "metrics",
        "component": ctx.project_key,
        "metricKeys": ",".join(METRIC_KEYS),
    }
    if ctx.is_pull_request and ctx.branch_name:
        params["pullRequest"] = ctx.branch_name
    elif ctx.branch_name:
        params["branch"] = ctx.branch_name
    return params


def _as_str(value: Any) -> str:
    if value is None or isinstance(value, (dict, list)):
        return ""
    return value if isinstance(value, str) else str(value)


def find_measure(measures: list, key: str) -> str:
    """Return the value of the first measure named *key*, or ``""``.

    Overall metrics carry ``"value"``; new-code metrics on older SonarQube
    versions only carry ``"period": {"value": ...}``. ``"value"`` wins when
    both are present.
    """
    for raw in measures:
        if not isinstance(raw, dict) or raw.get("metric") != key:
            continue
        if raw.get("value") is not None:
            return _as_str(raw["value"])
        period = raw.get("period")
        return _as_str(period.get("value")) if isinstance(period, dict) else ""
    return ""


def parse_measures(data: Any) -> Measures:
    """Convert a ``/api/measures/component`` response into Measures."""
    component = data.get("component") if isinstance(data, dict) else None
    measures = component.get("measures") if isinstance(component, dict) else None
    if not isinstance(measures, list):
        logger.warning("Measures response has no component.measures list")
        measures = []
    return Measures(**{key: find_measure(measures, key) for key in METRIC_KEYS})


def fetch_measures(client: SonarClient, ctx: ScanContext) -> Measures:
    """Query SonarQube for the metrics of the scan described by *ctx*.

    Raises whatever the client raises (NetworkError, DecodeError,
    SonarClientError); a metric missing from the response is ``""``.
    """
    data = client.get(MEASURES_ENDPOINT, params=build_params(ctx))
    return parse_measures(data)
