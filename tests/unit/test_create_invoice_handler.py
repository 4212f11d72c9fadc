from unittest.mock import MagicMock, patch

import pytest

from conftest import api_event, body_of
from contract_billing.config import Settings
from contract_billing.errors import FieldError, WaveAPIError
from contract_billing.invoice import lambda_function
from contract_billing.invoice.lambda_function import DEMO_PAYMENT_URL, handle
from contract_billing.wave import WaveClient

REQUEST = {
    "contractData": {"clientName": "Ada Lovelace", "clientEmail": "ada@example.com", "contractId": "C-42"},
    "invoice": {"packageKey": "growth"},
}


@pytest.fixture
def wave():
    client = MagicMock(spec=WaveClient)
    client.create_customer.return_value = "cust-1"
    client.create_invoice.return_value = {"id": "inv-1", "status": "DRAFT", "viewUrl": "https://wave.test/view/inv-1"}
    client.approve_invoice.return_value = {"id": "inv-1", "status": "UNSENT"}
    client.send_invoice.return_value = {"id": "inv-1", "status": "SENT", "viewUrl": "https://wave.test/pay/inv-1"}
    return client


def test_rejects_non_post(settings, wave):
    resp = handle(api_event("GET"), settings, wave)

    assert resp["statusCode"] == 405


@pytest.mark.parametrize("body", [
    {},
    {"contractData": {"clientName": "Ada"}},
    {"contractData": {"clientName": "Ada"}, "invoice": {}},
    "{not json",
])
def test_rejects_incomplete_requests(settings, wave, body):
    resp = handle(api_event("POST", body), settings, wave)

    assert resp["statusCode"] == 400
    assert "error" in body_of(resp)


def test_demo_mode_without_credentials(wave):
    resp = handle(api_event("POST", REQUEST), Settings(), wave)

    assert resp["statusCode"] == 200
    assert body_of(resp)["mode"] == "demo"
    assert body_of(resp)["paymentUrl"] == DEMO_PAYMENT_URL
    assert wave.method_calls == []


def test_demo_mode_makes_no_network_call():
    with patch("contract_billing.wave.requests.Session") as session_cls:
        resp = handle(api_event("POST", REQUEST), Settings(wave_api_key="k"))

    assert body_of(resp)["mode"] == "demo"
    session_cls.return_value.post.assert_not_called()


def test_live_mode(settings, wave):
    resp = handle(api_event("POST", REQUEST), settings, wave)

    assert resp["statusCode"] == 200
    assert body_of(resp) == {
        "mode": "live",
        "invoiceId": "inv-1",
        "paymentUrl": "https://wave.test/pay/inv-1",
    }


def test_approval_failure_is_still_live(settings, wave):
    wave.approve_invoice.side_effect = WaveAPIError("Approve invoice failed: Unknown error")
    wave.send_invoice.side_effect = WaveAPIError("Send invoice failed: Unknown error")

    body = body_of(handle(api_event("POST", REQUEST), settings, wave))

    assert body["mode"] == "live"
    assert body["paymentUrl"] == "https://wave.test/view/inv-1"


def test_fallback_on_customer_failure(settings, wave):
    wave.create_customer.side_effect = WaveAPIError(
        "Create customer failed: Email is invalid",
        [FieldError(message="Email is invalid", code="INVALID")],
    )

    resp = handle(api_event("POST", REQUEST), settings, wave)
    body = body_of(resp)

    assert resp["statusCode"] == 200
    assert body["mode"] == "fallback"
    assert body["paymentUrl"] == DEMO_PAYMENT_URL
    assert body["error"] == "Create customer failed: Email is invalid"
    assert body["errorDetails"] == [{"message": "Email is invalid", "code": "INVALID"}]


def test_fallback_on_invoice_failure(settings, wave):
    wave.create_invoice.side_effect = WaveAPIError("Create invoice failed: Unknown error")

    body = body_of(handle(api_event("POST", REQUEST), settings, wave))

    assert body["mode"] == "fallback"
    assert body["error"] == "Create invoice failed: Unknown error"
    assert body["errorDetails"] is None


def test_unknown_package_is_fallback_not_crash(settings, wave):
    request = dict(REQUEST, invoice={"packageKey": "platinum"})

    resp = handle(api_event("POST", request), settings, wave)

    assert resp["statusCode"] == 200
    assert body_of(resp)["mode"] == "fallback"
    assert "platinum" in body_of(resp)["error"]


def test_lambda_handler_reads_environment(monkeypatch):
    monkeypatch.delenv("WAVE_API_KEY", raising=False)
    monkeypatch.delenv("WAVE_BUSINESS_ID", raising=False)

    resp = lambda_function.lambda_handler(api_event("POST", REQUEST), None)

    assert body_of(resp)["mode"] == "demo"


def test_lambda_handler_survives_bad_timeout_setting(monkeypatch):
    monkeypatch.delenv("WAVE_API_KEY", raising=False)
    monkeypatch.setenv("HTTP_TIMEOUT_SECONDS", "thirty")

    resp = lambda_function.lambda_handler(api_event("POST", REQUEST), None)

    assert resp["statusCode"] == 200
    assert body_of(resp)["mode"] == "demo"
