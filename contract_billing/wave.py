"""WaveApps GraphQL client.

One shared client for every handler: authenticated POSTs to the public
GraphQL endpoint, with transport errors, GraphQL ``errors`` arrays and
``didSucceed: false`` mutation payloads all raised as ``WaveAPIError``.
"""
import json
import logging
from typing import Any, Dict, List, Optional

import requests

from contract_billing.config import DEFAULT_HTTP_TIMEOUT, WAVE_GRAPHQL_ENDPOINT, Settings
from contract_billing.errors import ConfigurationError, FieldError, WaveAPIError, field_errors

logger = logging.getLogger(__name__)


BUSINESSES_QUERY = """
query Businesses {
  businesses {
    edges {
      node { id name isClassicAccounting isClassicInvoicing }
    }
  }
}
"""

ACCOUNTS_QUERY = """
query Accounts($id: ID!) {
  business(id: $id) {
    id
    name
    accounts {
      edges {
        node { id name type { value } subtype { value } }
      }
    }
  }
}
"""

PRODUCTS_QUERY = """
query Products($id: ID!) {
  business(id: $id) {
    id
    name
    products {
      edges {
        node { id name }
      }
    }
  }
}
"""

CUSTOMER_CREATE = """
mutation CreateCustomer($input: CustomerCreateInput!) {
  customerCreate(input: $input) {
    didSucceed
    inputErrors { code message path }
    customer { id }
  }
}
"""

INVOICE_CREATE = """
mutation InvoiceCreate($input: InvoiceCreateInput!) {
  invoiceCreate(input: $input) {
    didSucceed
    inputErrors { code message path }
    invoice { id status viewUrl }
  }
}
"""

INVOICE_APPROVE = """
mutation InvoiceApprove($input: InvoiceApproveInput!) {
  invoiceApprove(input: $input) {
    didSucceed
    inputErrors { code message path }
    invoice { id status }
  }
}
"""

INVOICE_SEND = """
mutation InvoiceSend($input: InvoiceSendInput!) {
  invoiceSend(input: $input) {
    didSucceed
    inputErrors { code message path }
    invoice { id status viewUrl }
  }
}
"""

PRODUCT_CREATE = """
mutation ProductCreate($input: ProductCreateInput!) {
  productCreate(input: $input) {
    didSucceed
    inputErrors { code message path }
    product { id name }
  }
}
"""


def edges_to_nodes(connection: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Flatten a GraphQL ``{edges: [{node: ...}]}`` connection."""
    edges = (connection or {}).get("edges") or []
    return [edge.get("node") for edge in edges if edge and edge.get("node") is not None]


class WaveClient:
    def __init__(
        self,
        api_key: str,
        endpoint: str = WAVE_GRAPHQL_ENDPOINT,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.endpoint = endpoint
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings, session: Optional[requests.Session] = None) -> "WaveClient":
        return cls(
            api_key=settings.wave_api_key,
            endpoint=settings.wave_endpoint,
            timeout=settings.http_timeout,
            session=session,
        )

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}

    def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """POST a query or mutation and return the unwrapped ``data`` payload."""
        if not self.api_key:
            raise ConfigurationError(
                "Missing WAVE_API_KEY",
                [FieldError(message="Set WAVE_API_KEY in your deployment environment.")],
            )

        try:
            resp = self.session.post(
                self.endpoint,
                headers=self._headers(),
                json={"query": query, "variables": variables or {}},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise WaveAPIError(f"Wave GraphQL error: {exc}") from exc

        try:
            body = resp.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        errors = body.get("errors")
        if not resp.ok or errors:
            detail = json.dumps(errors) if errors else (resp.reason or f"HTTP {resp.status_code}")
            logger.debug("Wave call failed with status %s", resp.status_code)
            raise WaveAPIError(f"Wave GraphQL error: {detail}", field_errors(errors))

        return body.get("data") or {}

    def mutate(self, mutation: str, variables: Dict[str, Any], field: str, entity: str, action: str) -> Dict[str, Any]:
        """Run a mutation and return its ``entity`` object.

        Raises ``WaveAPIError("<action> failed: ...")`` carrying the input errors
        when the payload reports failure or omits the entity.
        """
        data = self.execute(mutation, variables)
        result = data.get(field) or {}
        input_errors = result.get("inputErrors") or []
        if not result.get("didSucceed") or not result.get(entity):
            first = input_errors[0].get("message") if input_errors and isinstance(input_errors[0], dict) else None
            raise WaveAPIError(f"{action} failed: {first or 'Unknown error'}", field_errors(input_errors))
        return result[entity]

    # ── Queries ──────────────────────────────────────────────────────────────

    def list_businesses(self) -> List[Dict[str, Any]]:
        data = self.execute(BUSINESSES_QUERY)
        return edges_to_nodes(data.get("businesses"))

    def business_accounts(self, business_id: str) -> Dict[str, Any]:
        data = self.execute(ACCOUNTS_QUERY, {"id": business_id})
        business = data.get("business") or {}
        return {
            "business": {"id": business.get("id"), "name": business.get("name")},
            "accounts": [_flatten_account(node) for node in edges_to_nodes(business.get("accounts"))],
        }

    def business_products(self, business_id: str) -> Dict[str, Any]:
        data = self.execute(PRODUCTS_QUERY, {"id": business_id})
        business = data.get("business") or {}
        return {
            "business": {"id": business.get("id"), "name": business.get("name")},
            "products": edges_to_nodes(business.get("products")),
        }

    # ── Mutations ────────────────────────────────────────────────────────────

    def create_customer(self, business_id: str, name: str, email: str) -> str:
        customer = self.mutate(
            CUSTOMER_CREATE,
            {
                "input": {
                    "businessId": business_id,
                    "name": name,
                    "firstName": name,
                    "lastName": "Client",
                    "email": email,
                }
            },
            field="customerCreate",
            entity="customer",
            action="Create customer",
        )
        if not customer.get("id"):
            raise WaveAPIError("Create customer failed: Unknown error")
        return customer["id"]

    def create_invoice(self, invoice_input: Dict[str, Any]) -> Dict[str, Any]:
        invoice = self.mutate(
            INVOICE_CREATE,
            {"input": invoice_input},
            field="invoiceCreate",
            entity="invoice",
            action="Create invoice",
        )
        if not invoice.get("id"):
            raise WaveAPIError("Create invoice failed: Unknown error")
        return invoice

    def approve_invoice(self, invoice_id: str) -> Dict[str, Any]:
        return self.mutate(
            INVOICE_APPROVE,
            {"input": {"invoiceId": invoice_id}},
            field="invoiceApprove",
            entity="invoice",
            action="Approve invoice",
        )

    def send_invoice(self, invoice_id: str) -> Dict[str, Any]:
        return self.mutate(
            INVOICE_SEND,
            {"input": {"invoiceId": invoice_id}},
            field="invoiceSend",
            entity="invoice",
            action="Send invoice",
        )

    def create_product(self, product_input: Dict[str, Any]) -> Dict[str, Any]:
        return self.mutate(
            PRODUCT_CREATE,
            {"input": product_input},
            field="productCreate",
            entity="product",
            action="Create product",
        )


def _flatten_account(node: Dict[str, Any]) -> Dict[str, Any]:
    # type/subtype are enum wrappers in the public schema
    account = dict(node)
    for key in ("type", "subtype"):
        value = account.get(key)
        if isinstance(value, dict):
            account[key] = value.get("value")
    return account
