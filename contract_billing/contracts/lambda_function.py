import base64
import binascii
import logging
import re
from typing import Any, Dict, Optional

from contract_billing.config import Settings, load_settings
from contract_billing.events import BadRequest, json_response, method_of, parse_json_body
from contract_billing.github import GitHubContentsClient
from contract_billing.log import configure_logging

logger = logging.getLogger(__name__)

UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


def sanitize_filename(filename: str) -> str:
    return UNSAFE_FILENAME_CHARS.sub("_", filename)


def commit_message(contract_data: Optional[Dict[str, Any]]) -> str:
    contract_id = (contract_data or {}).get("contractId") or ""
    return f"chore(contracts): add signed contract {contract_id}".strip()


def normalize_base64(content: str) -> str:
    """Strip line breaks and other whitespace (RFC 2045 wrapping), then validate."""
    compact = "".join(content.split())
    if not compact:
        raise BadRequest("Missing filename or content")
    try:
        base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError):
        raise BadRequest("content must be base64 encoded")
    return compact


def handle(event: Dict[str, Any], settings: Settings, github: Optional[GitHubContentsClient] = None) -> Dict[str, Any]:
    """Commit an uploaded (base64) contract to the configured GitHub repository."""
    if method_of(event) != "POST":
        return json_response(405, {"error": "Method not allowed"})

    try:
        payload = parse_json_body(event)
        filename = payload.get("filename")
        content = payload.get("content")
        if not filename or not content or not isinstance(filename, str) or not isinstance(content, str):
            raise BadRequest("Missing filename or content")
        content = normalize_base64(content)
    except BadRequest as exc:
        return json_response(400, {"error": str(exc)})

    contract_data = payload.get("contractData")
    if not isinstance(contract_data, dict):
        contract_data = None
    path = "/".join(part for part in (settings.github_contracts_dir, sanitize_filename(filename)) if part)

    try:
        github = github or GitHubContentsClient.from_settings(settings)
        result = github.put_file(path, content, commit_message(contract_data))
    except Exception as exc:
        logger.exception("Upload contract error for %s", path)
        return json_response(500, {"error": str(exc) or "Upload failed"})

    logger.info("Stored contract at %s (%s)", path, result.sha)
    return json_response(200, {"downloadUrl": result.download_url, "sha": result.sha})


def lambda_handler(event, context):
    """POST /upload-contract"""
    settings = load_settings()
    configure_logging(settings.log_level)
    return handle(event, settings)
