"""Operator diagnostics: list Wave businesses, accounts and products.

Failures are reported as 200 responses with an ``error`` field so the
endpoints stay easy to script against.
"""
import logging
from typing import Any, Dict, List, Optional

from contract_billing.config import Settings, load_settings
from contract_billing.errors import error_details
from contract_billing.events import json_response, method_of, query_param
from contract_billing.log import configure_logging
from contract_billing.wave import WaveClient

logger = logging.getLogger(__name__)


def filter_by_name(items: List[Dict[str, Any]], q: Optional[str]) -> List[Dict[str, Any]]:
    needle = (q or "").lower()
    if not needle:
        return list(items)
    return [item for item in items if needle in (item.get("name") or "").lower()]


def _error_response(exc: Exception) -> Dict[str, Any]:
    return json_response(200, {"error": str(exc) or "Unknown error", "errorDetails": error_details(exc)})


def list_accounts(event: Dict[str, Any], settings: Settings, wave: Optional[WaveClient] = None) -> Dict[str, Any]:
    if method_of(event) != "GET":
        return json_response(405, {"error": "Method not allowed"})
    if not settings.wave_business_id:
        return json_response(200, {"error": "Missing WAVE_BUSINESS_ID"})

    wave = wave or WaveClient.from_settings(settings)
    try:
        result = wave.business_accounts(settings.wave_business_id)
    except Exception as exc:
        logger.warning("Listing accounts failed: %s", exc)
        return _error_response(exc)

    accounts = result["accounts"]
    return json_response(200, {"business": result["business"], "count": len(accounts), "accounts": accounts})


def list_products(event: Dict[str, Any], settings: Settings, wave: Optional[WaveClient] = None) -> Dict[str, Any]:
    if method_of(event) != "GET":
        return json_response(405, {"error": "Method not allowed"})
    if not settings.wave_business_id:
        return json_response(200, {"error": "Missing WAVE_BUSINESS_ID"})

    wave = wave or WaveClient.from_settings(settings)
    try:
        result = wave.business_products(settings.wave_business_id)
    except Exception as exc:
        logger.warning("Listing products failed: %s", exc)
        return _error_response(exc)

    products = filter_by_name(result["products"], query_param(event, "q"))
    return json_response(200, {"business": result["business"], "count": len(products), "products": products})


def list_businesses(event: Dict[str, Any], settings: Settings, wave: Optional[WaveClient] = None) -> Dict[str, Any]:
    """Every business the API key can see, to help find WAVE_BUSINESS_ID."""
    if method_of(event) != "GET":
        return json_response(405, {"error": "Method not allowed"})

    wave = wave or WaveClient.from_settings(settings)
    try:
        businesses = wave.list_businesses()
    except Exception as exc:
        logger.warning("Listing businesses failed: %s", exc)
        return _error_response(exc)

    logger.info("Found %d Wave businesses", len(businesses))
    return json_response(200, {"count": len(businesses), "businesses": businesses})


def _invoke(view, event):
    settings = load_settings()
    configure_logging(settings.log_level)
    return view(event, settings)


def list_accounts_handler(event, context):
    """GET /list-accounts"""
    return _invoke(list_accounts, event)


def list_products_handler(event, context):
    """GET /list-products?q=<name filter>"""
    return _invoke(list_products, event)


def list_businesses_handler(event, context):
    """GET /test-wave-business"""
    return _invoke(list_businesses, event)
