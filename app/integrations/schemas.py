"""
Pydantic schemas for integration API requests and responses, plus the
normalized outcome types returned by provider clients.

Request Schemas:
- ConnectionSettings: Full per-user settings record (also the GET response)
- ConnectionTestRequest: Candidate domain/key to probe

Response Schemas:
- ConnectionTestResponse: Probe outcome as {success, message}
- UploadResponse: URL of a relayed upload

Outcome Types:
- ProbeResult: Classified reachability of an external endpoint
- RelayOutcome: Success{url} or Failure{message} of a relayed upload
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


# ================================================================================
# REQUEST SCHEMAS
# ================================================================================

class ConnectionSettings(BaseModel):
    """
    Per-user connection settings for an integration.

    Invariant (enforced when saving, see service.validate_settings):
        enabled=True implies non-empty domain and api_key.

    Example:
        {
            "enabled": true,
            "domain": "https://img.example.com",
            "api_key": "chv_...",
            "album_id": ""
        }
    """
    enabled: bool = Field(
        default=False,
        description="Whether the integration is active"
    )
    domain: str = Field(
        default="",
        description="Base URL of the external service, without trailing slash"
    )
    api_key: str = Field(
        default="",
        description="Credential sent to the external service in the X-API-Key header"
    )
    album_id: str = Field(
        default="",
        description="Destination album on the external service (empty = none)"
    )


class ConnectionTestRequest(BaseModel):
    """Candidate credentials to probe before saving them."""
    domain: str = Field(default="", description="Base URL of the external service")
    api_key: str = Field(default="", description="API key to test")


# ================================================================================
# RESPONSE SCHEMAS
# ================================================================================

class ConnectionTestResponse(BaseModel):
    """
    Result of a connection test.

    Always returned with HTTP 200; ``success`` carries the logical outcome.
    """
    success: bool
    message: str


class UploadResponse(BaseModel):
    """Public URL of an image relayed to the external service."""
    url: str


class SaveSettingsResponse(BaseModel):
    success: bool = True


# ================================================================================
# OUTCOME TYPES
# ================================================================================

class ProbeStatus(str, Enum):
    """Reachability classification of one diagnostic round trip."""
    REACHABLE = "reachable"
    ENDPOINT_NOT_FOUND = "endpoint_not_found"
    AUTHENTICATION_REJECTED = "authentication_rejected"
    CONNECTION_FAILED = "connection_failed"
    UNRECOGNIZED = "unrecognized"


class ProbeResult(BaseModel):
    """
    Tagged probe outcome. ``detail`` is only set for CONNECTION_FAILED and
    UNRECOGNIZED and is a short, user-presentable reason.
    """
    status: ProbeStatus
    detail: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == ProbeStatus.REACHABLE

    @property
    def message(self) -> str:
        if self.status == ProbeStatus.REACHABLE:
            return "Connection successful"
        if self.status == ProbeStatus.ENDPOINT_NOT_FOUND:
            return "Chevereto API endpoint not found. Please check the domain."
        if self.status == ProbeStatus.AUTHENTICATION_REJECTED:
            return "Authentication failed. Please check your API key."
        if self.status == ProbeStatus.CONNECTION_FAILED:
            return f"Connection failed: {self.detail}"
        return f"Invalid domain URL: {self.detail}"

    def to_response(self) -> ConnectionTestResponse:
        return ConnectionTestResponse(success=self.success, message=self.message)


class RelayOutcome(BaseModel):
    """Either Success{url} or Failure{message}."""
    success: bool
    url: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def succeeded(cls, url: str) -> "RelayOutcome":
        return cls(success=True, url=url)

    @classmethod
    def failed(cls, message: str) -> "RelayOutcome":
        return cls(success=False, message=message)
