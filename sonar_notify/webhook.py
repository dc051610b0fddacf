"""Parse the SonarQube webhook into a ScanContext.

Usage:
    ctx = parse_webhook(request.args, request.get_data())

The webhook payload shape varies between SonarQube versions and editions
(``branch`` is absent on Community Edition without the branch plugin), so
every field except ``access_token`` is optional and falls back to ``""``.
"""

import json
from typing import Any, Mapping

from sonar_notify.errors import DecodeError, ValidationError
from sonar_notify.models import ScanContext


def get_str(tree: Any, *path: str) -> str:
    """Follow *path* through nested dicts and return a string, or ``""``.

    Returns ``""`` when any level is missing, is not a mapping, or when the
    final value is not a string.
    """
    node = tree
    for key in path:
        if not isinstance(node, dict):
            return ""
        node = node.get(key)
    return node if isinstance(node, str) else ""


def parse_webhook(query: Mapping[str, str], body: str | bytes) -> ScanContext:
    """Build a ScanContext from the query parameters and JSON body.

    Raises:
        ValidationError: ``access_token`` is missing or empty
        DecodeError:     the body is not a JSON object
    """
    access_token = (query.get("access_token") or "").strip()
    if not access_token:
        raise ValidationError("missing access token")

    try:
        payload = json.loads(body or b"")
    except ValueError as exc:
        raise DecodeError(f"webhook body is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise DecodeError("webhook body must be a JSON object")

    return ScanContext(
        access_token=access_token,
        sonar_token=(query.get("sonar_token") or "").strip(),
        server_url=get_str(payload, "serverUrl").rstrip("/"),
        project_name=get_str(payload, "project", "name"),
        project_key=get_str(payload, "project", "key"),
        project_url=get_str(payload, "project", "url"),
        branch_name=get_str(payload, "branch", "name"),
        branch_url=get_str(payload, "branch", "url"),
        branch_type=get_str(payload, "branch", "type"),
    )
