import logging
from typing import Any, Dict, Optional

from contract_billing.config import Settings, load_settings
from contract_billing.errors import error_details
from contract_billing.events import BadRequest, json_response, method_of, parse_json_body
from contract_billing.invoice.workflow import InvoiceRequest, create_deposit_invoice
from contract_billing.log import configure_logging
from contract_billing.wave import WaveClient

logger = logging.getLogger(__name__)

DEMO_PAYMENT_URL = "https://link.waveapps.com/payment-demo"


def _parse_request(event: Dict[str, Any]) -> InvoiceRequest:
    payload = parse_json_body(event)
    contract_data = payload.get("contractData")
    invoice = payload.get("invoice")
    if not isinstance(contract_data, dict) or not isinstance(invoice, dict) or not invoice.get("packageKey"):
        raise BadRequest("Missing contractData or invoice.packageKey")

    return InvoiceRequest(
        client_name=contract_data.get("clientName") or "",
        client_email=contract_data.get("clientEmail") or "",
        contract_id=contract_data.get("contractId") or "",
        package_key=invoice["packageKey"],
    )


def handle(event: Dict[str, Any], settings: Settings, wave: Optional[WaveClient] = None) -> Dict[str, Any]:
    """Create a 50% deposit invoice in Wave for the requested package.

    Business errors never surface as HTTP errors: without credentials the
    response is ``mode: demo``, and any workflow failure is ``mode: fallback``,
    both carrying the demo payment link.
    """
    if method_of(event) != "POST":
        return json_response(405, {"error": "Method not allowed"})

    try:
        request = _parse_request(event)
    except BadRequest as exc:
        return json_response(400, {"error": str(exc)})

    if not settings.wave_configured:
        logger.info("Wave credentials not configured, returning demo link")
        return json_response(200, {
            "mode": "demo",
            "paymentUrl": DEMO_PAYMENT_URL,
            "note": "WaveApps environment variables not set. Returning demo link.",
        })

    wave = wave or WaveClient.from_settings(settings)
    try:
        result = create_deposit_invoice(wave, settings, request)
    except Exception as exc:
        logger.exception("Wave invoice error for contract %s", request.contract_id)
        return json_response(200, {
            "mode": "fallback",
            "paymentUrl": DEMO_PAYMENT_URL,
            "error": str(exc) or "Unknown error",
            "errorDetails": error_details(exc),
        })

    return json_response(200, {
        "mode": "live",
        "invoiceId": result.invoice_id,
        "paymentUrl": result.payment_url,
    })


def lambda_handler(event, context):
    """POST /create-invoice"""
    settings = load_settings()
    configure_logging(settings.log_level)
    return handle(event, settings)
