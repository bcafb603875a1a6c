"""
Control Plane Client — the remote calls deployment is made of.

Wraps the account-scoped Durable Object namespace endpoints and the
script schedule endpoint of the control plane's v4 API.

Behavioral Contract:
- One HTTP request per call; no retries, no pagination.
- A non-success status raises RemoteError carrying the status and the
  response body verbatim.
- A success status whose body does not parse into the expected shape
  raises MalformedResponse.
- A request that produces no response raises TransportError.
"""

import logging
from typing import Any, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from durable_deploy.config.settings import Settings
from durable_deploy.errors import (
    DeployError,
    MalformedResponse,
    RemoteError,
    TransportError,
)
from durable_deploy.models.namespace import NamespaceRecord

logger = logging.getLogger(__name__)


class NamespaceUpsertRequest(BaseModel):
    """Body of a namespace create or update call."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    script: Optional[str] = None
    class_name: Optional[str] = Field(default=None, alias="class")

    def to_wire(self) -> dict:
        # Unset fields are omitted so a create without script/class is a placeholder
        return self.model_dump(by_alias=True, exclude_none=True)


def build_http_client(settings: Settings) -> httpx.Client:
    """Build an authenticated httpx client for the configured control plane."""
    headers = {"Content-Type": "application/json"}
    if settings.API_TOKEN:
        headers["Authorization"] = f"Bearer {settings.API_TOKEN}"
    elif settings.AUTH_EMAIL and settings.AUTH_KEY:
        headers["X-Auth-Email"] = settings.AUTH_EMAIL
        headers["X-Auth-Key"] = settings.AUTH_KEY
    else:
        raise DeployError(
            "No control plane credentials configured: set DURABLE_DEPLOY_API_TOKEN, "
            "or DURABLE_DEPLOY_AUTH_EMAIL and DURABLE_DEPLOY_AUTH_KEY"
        )
    return httpx.Client(
        base_url=settings.API_BASE_URL,
        headers=headers,
        timeout=settings.REQUEST_TIMEOUT_SECONDS,
    )


def _namespaces_path(account_id: str) -> str:
    return f"/accounts/{account_id}/workers/durable_objects/namespaces"


class ControlPlaneClient:
    """
    Thin synchronous client over an httpx.Client.

    The http client owns transport concerns (base URL, auth headers,
    timeouts); any httpx.Client works, including a test client.
    """

    def __init__(self, http: httpx.Client):
        self.http = http

    # --- Durable Object namespaces ---

    def list_namespaces(self, account_id: str) -> List[NamespaceRecord]:
        """List every namespace in the account, in the order returned."""
        operation = "List Durable Object namespaces"
        result = self._request(operation, "GET", _namespaces_path(account_id))
        if not isinstance(result, list):
            raise MalformedResponse(operation, repr(result), "expected a list")
        return [self._parse_record(operation, item) for item in result]

    def create_namespace(
        self,
        account_id: str,
        name: str,
        script: Optional[str] = None,
        class_name: Optional[str] = None,
    ) -> NamespaceRecord:
        """
        Create a namespace. Without script and class the namespace is a
        placeholder: it has an id but errors on access until updated.
        """
        operation = f"Create Durable Object namespace {name!r}"
        body = NamespaceUpsertRequest(name=name, script=script, class_name=class_name)
        result = self._request(
            operation, "POST", _namespaces_path(account_id), json=body.to_wire()
        )
        record = self._parse_record(operation, result)
        logger.info(
            "namespace.created name=%s id=%s script=%s class=%s",
            record.name, record.id, record.script, record.class_name,
        )
        return record

    def update_namespace(
        self,
        account_id: str,
        namespace_id: str,
        script: str,
        class_name: str,
        name: Optional[str] = None,
    ) -> None:
        """Replace the script and class a namespace is implemented by."""
        label = name or namespace_id
        operation = f"Update Durable Object namespace {label!r}"
        body = NamespaceUpsertRequest(script=script, class_name=class_name)
        self._request(
            operation,
            "PUT",
            f"{_namespaces_path(account_id)}/{namespace_id}",
            json=body.to_wire(),
        )
        logger.info(
            "namespace.updated name=%s id=%s script=%s class=%s",
            label, namespace_id, script, class_name,
        )

    # --- Script schedules ---

    def update_schedules(
        self, account_id: str, script_name: str, crons: List[str]
    ) -> List[str]:
        """Replace a script's cron triggers. Returns the crons now in effect."""
        operation = f"Update schedules for script {script_name!r}"
        result = self._request(
            operation,
            "PUT",
            f"/accounts/{account_id}/workers/scripts/{script_name}/schedules",
            json=[{"cron": cron} for cron in crons],
        )
        schedules = result.get("schedules") if isinstance(result, dict) else None
        if not isinstance(schedules, list):
            raise MalformedResponse(operation, repr(result), "expected a schedules list")
        try:
            return [str(item["cron"]) for item in schedules]
        except (KeyError, TypeError) as e:
            raise MalformedResponse(operation, repr(result), str(e)) from e

    # --- Internals ---

    def _request(
        self, operation: str, method: str, path: str, json: Any = None
    ) -> Any:
        """Issue one request and return the envelope's `result`."""
        try:
            res = self.http.request(method, path, json=json)
        except httpx.RequestError as e:
            logger.error("control_plane.request_error op=%r err=%s", operation, e)
            raise TransportError(operation, str(e)) from e

        if not res.is_success:
            logger.error(
                "control_plane.bad_status op=%r status=%d body=%s",
                operation, res.status_code, res.text,
            )
            raise RemoteError(res.status_code, res.text, operation)

        try:
            payload = res.json()
        except ValueError as e:
            raise MalformedResponse(operation, res.text, "body is not JSON") from e

        if not isinstance(payload, dict):
            raise MalformedResponse(operation, res.text, "expected an object")
        if payload.get("success") is False:
            raise RemoteError(res.status_code, res.text, operation)
        if "result" not in payload:
            raise MalformedResponse(operation, res.text, "missing result")
        return payload["result"]

    @staticmethod
    def _parse_record(operation: str, data: Any) -> NamespaceRecord:
        try:
            return NamespaceRecord.model_validate(data)
        except ValidationError as e:
            raise MalformedResponse(operation, repr(data), "not a namespace record") from e
