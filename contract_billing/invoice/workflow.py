"""Deposit invoice workflow.

customer -> draft invoice -> approve (best effort) -> send (best effort).
Each step needs the id produced by the previous one, so calls are sequential.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from contract_billing.catalog import deposit_for, format_amount, get_package
from contract_billing.config import PRODUCT_ID_ENV_VARS, Settings
from contract_billing.errors import ConfigurationError, FieldError
from contract_billing.wave import WaveClient

logger = logging.getLogger(__name__)

PAYMENT_TERMS_DAYS = 14


@dataclass(frozen=True)
class InvoiceRequest:
    client_name: str
    client_email: str
    contract_id: str
    package_key: str


@dataclass(frozen=True)
class InvoiceResult:
    invoice_id: str
    payment_url: Optional[str]
    status: Optional[str] = None


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def resolve_product_id(settings: Settings, package_key: str) -> str:
    product_id = settings.product_id_for(package_key)
    if not product_id:
        names = "/".join(key.upper() for key in PRODUCT_ID_ENV_VARS)
        raise ConfigurationError(
            "Missing WAVE_PRODUCT_ID",
            [
                FieldError(
                    message=(
                        f"Set WAVE_PRODUCT_ID_<PACKAGE> ({names}) or WAVE_PRODUCT_ID "
                        "to a valid Product ID in your Wave business."
                    )
                )
            ],
        )
    return product_id


def create_deposit_invoice(
    wave: WaveClient,
    settings: Settings,
    request: InvoiceRequest,
    today: Optional[date] = None,
) -> InvoiceResult:
    package = get_package(request.package_key)
    deposit = deposit_for(package.price)

    invoice_date = today or utc_today()
    due_date = invoice_date + timedelta(days=PAYMENT_TERMS_DAYS)

    product_id = resolve_product_id(settings, package.key)

    customer_id = wave.create_customer(
        business_id=settings.wave_business_id,
        name=request.client_name,
        email=request.client_email,
    )
    logger.info("Created Wave customer %s for contract %s", customer_id, request.contract_id)

    invoice = wave.create_invoice(
        {
            "businessId": settings.wave_business_id,
            "customerId": customer_id,
            "currency": settings.wave_currency,
            "status": "DRAFT",
            "invoiceDate": invoice_date.isoformat(),
            "dueDate": due_date.isoformat(),
            "memo": f"Contract {request.contract_id} - {package.name} - Initial 50% deposit",
            "items": [
                {
                    "productId": product_id,
                    "description": f"{package.name} - Initial Deposit (50%)",
                    "unitPrice": format_amount(deposit),
                    "quantity": 1,
                }
            ],
        }
    )
    invoice_id = invoice["id"]
    status = invoice.get("status")
    payment_url = invoice.get("viewUrl") or None
    logger.info("Created draft invoice %s (deposit %s)", invoice_id, deposit)

    try:
        approved = wave.approve_invoice(invoice_id)
        status = approved.get("status") or status
    except Exception as exc:
        logger.warning("Approving invoice %s failed, continuing: %s", invoice_id, exc)

    try:
        sent = wave.send_invoice(invoice_id)
        status = sent.get("status") or status
        if sent.get("viewUrl"):
            payment_url = sent["viewUrl"]
    except Exception as exc:
        logger.warning("Sending invoice %s failed, continuing: %s", invoice_id, exc)

    return InvoiceResult(invoice_id=invoice_id, payment_url=payment_url, status=status)
