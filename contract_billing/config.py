import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

WAVE_GRAPHQL_ENDPOINT = "https://gql.waveapps.com/graphql/public"

logger = logging.getLogger(__name__)

# The invoice workflow makes up to four sequential calls and API Gateway
# gives up after 29 s, so each call must stay well inside a quarter of that.
DEFAULT_HTTP_TIMEOUT = 5.0
MAX_HTTP_TIMEOUT = 6.0

# Package key -> environment variable holding that package's Wave product id
PRODUCT_ID_ENV_VARS = {
    "core": "WAVE_PRODUCT_ID_CORE",
    "growth": "WAVE_PRODUCT_ID_GROWTH",
    "full": "WAVE_PRODUCT_ID_FULL",
}


@dataclass(frozen=True)
class Settings:
    """Immutable configuration passed into every handler."""

    wave_api_key: str = ""
    wave_business_id: str = ""
    wave_currency: str = "USD"
    wave_product_ids: Dict[str, str] = field(default_factory=dict)
    wave_fallback_product_id: Optional[str] = None
    wave_income_account_id: Optional[str] = None
    wave_endpoint: str = WAVE_GRAPHQL_ENDPOINT
    github_token: Optional[str] = None
    github_repo: Optional[str] = None
    github_branch: str = "main"
    github_contracts_dir: str = "contracts"
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    log_level: str = "INFO"

    @property
    def wave_configured(self) -> bool:
        return bool(self.wave_api_key and self.wave_business_id)

    def product_id_for(self, package_key: str) -> Optional[str]:
        """Per-package product id first, then the generic fallback."""
        return self.wave_product_ids.get(package_key) or self.wave_fallback_product_id


def _get(environ: Mapping[str, str], name: str, default: Optional[str] = None) -> Optional[str]:
    value = environ.get(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _parse_timeout(value: Optional[str]) -> float:
    if not value:
        return DEFAULT_HTTP_TIMEOUT
    try:
        timeout = float(value)
    except ValueError:
        logger.warning("Ignoring non-numeric HTTP_TIMEOUT_SECONDS=%r, using %ss", value, DEFAULT_HTTP_TIMEOUT)
        return DEFAULT_HTTP_TIMEOUT
    if timeout <= 0:
        logger.warning("Ignoring non-positive HTTP_TIMEOUT_SECONDS=%r, using %ss", value, DEFAULT_HTTP_TIMEOUT)
        return DEFAULT_HTTP_TIMEOUT
    if timeout > MAX_HTTP_TIMEOUT:
        logger.warning("Capping HTTP_TIMEOUT_SECONDS=%r at %ss", value, MAX_HTTP_TIMEOUT)
        return MAX_HTTP_TIMEOUT
    return timeout


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Resolve Settings from the environment. Blank variables count as unset."""
    env = os.environ if environ is None else environ

    product_ids = {}
    for package_key, env_name in PRODUCT_ID_ENV_VARS.items():
        product_id = _get(env, env_name)
        if product_id:
            product_ids[package_key] = product_id

    http_timeout = _parse_timeout(_get(env, "HTTP_TIMEOUT_SECONDS"))

    return Settings(
        wave_api_key=_get(env, "WAVE_API_KEY", ""),
        wave_business_id=_get(env, "WAVE_BUSINESS_ID", ""),
        wave_currency=_get(env, "WAVE_CURRENCY", "USD"),
        wave_product_ids=product_ids,
        wave_fallback_product_id=_get(env, "WAVE_PRODUCT_ID"),
        wave_income_account_id=_get(env, "WAVE_INCOME_ACCOUNT_ID"),
        wave_endpoint=_get(env, "WAVE_GRAPHQL_ENDPOINT", WAVE_GRAPHQL_ENDPOINT),
        github_token=_get(env, "GITHUB_TOKEN"),
        github_repo=_get(env, "GITHUB_REPO"),
        github_branch=_get(env, "GITHUB_BRANCH", "main"),
        github_contracts_dir=_get(env, "GITHUB_CONTRACTS_DIR", "contracts").strip("/"),
        http_timeout=http_timeout,
        log_level=_get(env, "LOG_LEVEL", "INFO").upper(),
    )
