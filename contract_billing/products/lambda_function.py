"""Provision one Wave product per catalog package.

Setup utility: run once, then copy ``envHints`` into the deployment
environment as the WAVE_PRODUCT_ID_* variables.
"""
import logging
from typing import Any, Dict, Optional

from contract_billing.catalog import PACKAGES, format_amount
from contract_billing.config import PRODUCT_ID_ENV_VARS, Settings, load_settings
from contract_billing.errors import error_details
from contract_billing.events import json_response, method_of, query_param
from contract_billing.log import configure_logging
from contract_billing.wave import WaveClient

logger = logging.getLogger(__name__)

CONFIRM_VALUES = {"1", "true", "yes"}


def _confirmed(event: Dict[str, Any]) -> bool:
    return (query_param(event, "confirm") or "").strip().lower() in CONFIRM_VALUES


def create_products(wave: WaveClient, settings: Settings) -> Dict[str, Any]:
    """Attempt every package independently; one failure never blocks the rest."""
    products: Dict[str, Any] = {}
    errors: Dict[str, Any] = {}

    for key, package in PACKAGES.items():
        try:
            products[key] = wave.create_product({
                "businessId": settings.wave_business_id,
                "name": package.name,
                "description": package.description,
                "unitPrice": format_amount(package.price),
                "incomeAccountId": settings.wave_income_account_id,
            })
        except Exception as exc:
            logger.warning("Creating product for %s failed: %s", key, exc)
            errors[key] = {"message": str(exc), "details": error_details(exc)}

    return {
        "didSucceed": not errors,
        "products": products,
        "errors": errors,
        "envHints": {
            env_name: (products.get(key) or {}).get("id")
            for key, env_name in PRODUCT_ID_ENV_VARS.items()
        },
    }


def handle(event: Dict[str, Any], settings: Settings, wave: Optional[WaveClient] = None) -> Dict[str, Any]:
    method = method_of(event)
    if method != "POST" and not (method == "GET" and _confirmed(event)):
        return json_response(405, {"error": "Method not allowed. Use POST or GET ?confirm=true"})

    if not settings.wave_api_key:
        return json_response(200, {
            "error": "Missing WAVE_API_KEY",
            "note": "Set WAVE_API_KEY in your deployment environment.",
        })
    if not settings.wave_business_id:
        return json_response(200, {
            "error": "Missing WAVE_BUSINESS_ID",
            "note": "Set WAVE_BUSINESS_ID, then re-run to create products.",
        })
    if not settings.wave_income_account_id:
        return json_response(200, {
            "error": "Missing WAVE_INCOME_ACCOUNT_ID",
            "note": "Find an income account via /list-accounts, set WAVE_INCOME_ACCOUNT_ID, then re-run.",
        })

    wave = wave or WaveClient.from_settings(settings)
    try:
        result = create_products(wave, settings)
    except Exception as exc:
        logger.exception("Create products error")
        return json_response(200, {"error": str(exc) or "Unknown error", "errorDetails": error_details(exc)})

    return json_response(200, result)


def lambda_handler(event, context):
    settings = load_settings()
    configure_logging(settings.log_level)
    return handle(event, settings)
