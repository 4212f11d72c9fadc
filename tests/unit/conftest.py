import json
from unittest.mock import MagicMock

import pytest

from contract_billing.config import Settings


def make_response(status_code=200, payload=None, reason="OK"):
    """requests.Response stand-in with the attributes the clients read."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 400
    resp.reason = reason
    if isinstance(payload, Exception):
        resp.json.side_effect = payload
    else:
        resp.json.return_value = payload
    return resp


def api_event(method="GET", body=None, query=None, path="/"):
    return {
        "httpMethod": method,
        "path": path,
        "queryStringParameters": query,
        "body": json.dumps(body) if isinstance(body, dict) else body,
        "isBase64Encoded": False,
    }


def body_of(response):
    return json.loads(response["body"])


@pytest.fixture
def settings():
    return Settings(
        wave_api_key="wave-key",
        wave_business_id="biz-123",
        wave_currency="USD",
        wave_product_ids={"growth": "prod-growth"},
        wave_fallback_product_id="prod-default",
        wave_income_account_id="acct-income",
        github_token="gh-token",
        github_repo="acme/contracts",
    )


@pytest.fixture
def session():
    return MagicMock()
