"""API Gateway proxy event parsing and JSON responses."""
import base64
import binascii
import json
from typing import Any, Dict, Optional


class BadRequest(Exception):
    """Malformed request; handlers answer it with HTTP 400."""


def json_response(status: int, payload: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "statusCode": status,
        "headers": {
            "Content-Type": "application/json",
            "Access-Control-Allow-Origin": "*",
        },
        "body": json.dumps(payload),
    }


def method_of(event: Dict[str, Any]) -> str:
    """HTTP method for REST (v1) and HTTP API (v2) proxy events."""
    method = event.get("httpMethod")
    if not method:
        method = ((event.get("requestContext") or {}).get("http") or {}).get("method")
    return (method or "").upper()


def path_of(event: Dict[str, Any]) -> str:
    return event.get("path") or event.get("rawPath") or ""


def parse_json_body(event: Dict[str, Any]) -> Dict[str, Any]:
    body = event.get("body")
    if body is None or body == "":
        return {}
    if isinstance(body, dict):
        return body

    if event.get("isBase64Encoded"):
        try:
            body = base64.b64decode(body).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            raise BadRequest("Invalid base64 request body")

    try:
        payload = json.loads(body)
    except json.JSONDecodeError:
        raise BadRequest("Invalid JSON body")
    if not isinstance(payload, dict):
        raise BadRequest("JSON body must be an object")
    return payload


def query_param(event: Dict[str, Any], name: str) -> Optional[str]:
    params = event.get("queryStringParameters") or {}
    return params.get(name)
