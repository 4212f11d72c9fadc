"""Error envelope shared by the Wave and GitHub integrations.

Every failure from an external service, whether it is a transport error
(non-2xx, GraphQL ``errors`` array) or an application error
(``didSucceed: false``), is raised as an ``IntegrationError`` carrying a
human-readable message and an optional list of ``FieldError`` descriptors.
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional


@dataclass(frozen=True)
class FieldError:
    message: str
    code: Optional[str] = None
    path: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "FieldError":
        """Build from a Wave ``inputErrors`` entry or a GraphQL error object."""
        if not isinstance(payload, dict):
            return cls(message=str(payload))

        code = payload.get("code")
        extensions = payload.get("extensions")
        if code is None and isinstance(extensions, dict):
            code = extensions.get("code")

        path = payload.get("path")
        if isinstance(path, (list, tuple)):
            path = ".".join(str(part) for part in path)

        return cls(
            message=str(payload.get("message") or "Unknown error"),
            code=str(code) if code is not None else None,
            path=path or None,
        )

    def to_dict(self) -> Dict[str, str]:
        data = {"message": self.message}
        if self.code is not None:
            data["code"] = self.code
        if self.path is not None:
            data["path"] = self.path
        return data


def field_errors(payloads: Optional[Iterable[Any]]) -> Optional[List[FieldError]]:
    if not payloads:
        return None
    return [FieldError.from_payload(item) for item in payloads]


class IntegrationError(Exception):
    """An external call failed; ``details`` holds the service's field errors."""

    def __init__(self, message: str, details: Optional[List[FieldError]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = list(details) if details else None

    def details_payload(self) -> Optional[List[Dict[str, str]]]:
        if not self.details:
            return None
        return [detail.to_dict() for detail in self.details]


class ConfigurationError(IntegrationError):
    """Required configuration is missing; raised before any network call."""


class WaveAPIError(IntegrationError):
    pass


class GitHubAPIError(IntegrationError):
    pass


def error_details(exc: BaseException) -> Optional[List[Dict[str, str]]]:
    """Structured details for any exception; None for non-integration errors."""
    if isinstance(exc, IntegrationError):
        return exc.details_payload()
    return None
