import pytest
import requests

from conftest import make_response
from contract_billing.errors import ConfigurationError, WaveAPIError
from contract_billing.wave import WaveClient, edges_to_nodes


@pytest.fixture
def client(session):
    return WaveClient(api_key="wave-key", endpoint="https://wave.test/graphql", timeout=7, session=session)


def test_execute_posts_authenticated_query(client, session):
    session.post.return_value = make_response(200, {"data": {"ok": True}})

    assert client.execute("query { ok }", {"a": 1}) == {"ok": True}

    args, kwargs = session.post.call_args
    assert args[0] == "https://wave.test/graphql"
    assert kwargs["headers"]["Authorization"] == "Bearer wave-key"
    assert kwargs["json"] == {"query": "query { ok }", "variables": {"a": 1}}
    assert kwargs["timeout"] == 7


def test_missing_api_key_fails_before_network(session):
    client = WaveClient(api_key="", session=session)

    with pytest.raises(ConfigurationError) as excinfo:
        client.execute("query { ok }")

    assert "Missing WAVE_API_KEY" in str(excinfo.value)
    assert excinfo.value.details
    session.post.assert_not_called()


def test_graphql_errors_raise_with_details(client, session):
    errors = [{"message": "Invalid business", "extensions": {"code": "NOT_FOUND"}}]
    session.post.return_value = make_response(200, {"data": None, "errors": errors})

    with pytest.raises(WaveAPIError) as excinfo:
        client.execute("query { ok }")

    assert "Invalid business" in excinfo.value.message
    assert excinfo.value.details_payload() == [{"message": "Invalid business", "code": "NOT_FOUND"}]


def test_http_error_without_body_uses_reason(client, session):
    session.post.return_value = make_response(502, ValueError("no json"), reason="Bad Gateway")

    with pytest.raises(WaveAPIError) as excinfo:
        client.execute("query { ok }")

    assert excinfo.value.message == "Wave GraphQL error: Bad Gateway"
    assert excinfo.value.details is None


def test_transport_exception_is_wrapped(client, session):
    session.post.side_effect = requests.ConnectionError("dns failure")

    with pytest.raises(WaveAPIError) as excinfo:
        client.execute("query { ok }")

    assert "dns failure" in excinfo.value.message


def test_mutation_failure_surfaces_first_input_error(client, session):
    session.post.return_value = make_response(200, {"data": {"customerCreate": {
        "didSucceed": False,
        "inputErrors": [
            {"code": "INVALID", "message": "Email is invalid", "path": ["input", "email"]},
            {"code": "INVALID", "message": "Name too long", "path": ["input", "name"]},
        ],
        "customer": None,
    }}})

    with pytest.raises(WaveAPIError) as excinfo:
        client.create_customer("biz-1", "Ada", "bad-email")

    assert excinfo.value.message == "Create customer failed: Email is invalid"
    assert len(excinfo.value.details) == 2


def test_mutation_without_errors_reports_unknown(client, session):
    session.post.return_value = make_response(200, {"data": {"invoiceCreate": None}})

    with pytest.raises(WaveAPIError, match="Create invoice failed: Unknown error"):
        client.create_invoice({"businessId": "biz-1"})


def test_create_customer_returns_id(client, session):
    session.post.return_value = make_response(200, {"data": {"customerCreate": {
        "didSucceed": True, "inputErrors": [], "customer": {"id": "cust-1"},
    }}})

    assert client.create_customer("biz-1", "Ada Lovelace", "ada@example.com") == "cust-1"

    variables = session.post.call_args.kwargs["json"]["variables"]
    assert variables["input"] == {
        "businessId": "biz-1",
        "name": "Ada Lovelace",
        "firstName": "Ada Lovelace",
        "lastName": "Client",
        "email": "ada@example.com",
    }


def test_business_accounts_flattens_edges(client, session):
    session.post.return_value = make_response(200, {"data": {"business": {
        "id": "biz-1",
        "name": "Acme",
        "accounts": {"edges": [
            {"node": {"id": "a1", "name": "Sales", "type": {"value": "INCOME"}, "subtype": {"value": "INCOME"}}},
        ]},
    }}})

    result = client.business_accounts("biz-1")

    assert result["business"] == {"id": "biz-1", "name": "Acme"}
    assert result["accounts"] == [{"id": "a1", "name": "Sales", "type": "INCOME", "subtype": "INCOME"}]


def test_edges_to_nodes_handles_missing_connection():
    assert edges_to_nodes(None) == []
    assert edges_to_nodes({"edges": [{"node": {"id": 1}}, {"node": None}]}) == [{"id": 1}]
