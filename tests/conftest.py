"""Shared fixtures: an in-process fake of the control plane's namespace API."""

import json
import logging
from logging.handlers import RotatingFileHandler
from typing import Dict, List, Optional, Tuple

import pytest
from fastapi import Body, FastAPI
from fastapi.responses import Response
from fastapi.testclient import TestClient

from durable_deploy.control_plane.client import ControlPlaneClient
from durable_deploy.util.logger import LevelColorFormatter

NAMESPACES = "/accounts/{account_id}/workers/durable_objects/namespaces"


def _envelope(result) -> dict:
    return {"success": True, "errors": [], "messages": [], "result": result}


def _error(status: int, code: int, message: str) -> Response:
    body = json.dumps({"success": False, "errors": [{"code": code, "message": message}]})
    return Response(content=body, status_code=status, media_type="application/json")


class FakeControlPlane:
    """
    Records every call as (operation, account_id, payload) and keeps
    namespaces keyed by id. `fail()` makes the next calls of an operation
    answer with a canned status and body.
    """

    def __init__(self):
        self.namespaces: Dict[str, dict] = {}
        self.schedules: Dict[str, List[str]] = {}
        self.calls: List[Tuple[str, str, object]] = []
        self._failures: Dict[str, Tuple[int, str]] = {}
        self._next_id = 1

    # --- Test helpers ---

    def seed(
        self,
        name: str,
        script: Optional[str] = None,
        class_name: Optional[str] = None,
        id: Optional[str] = None,
    ) -> dict:
        ns_id = id or self._new_id()
        record = {"id": ns_id, "name": name, "script": script, "class": class_name}
        self.namespaces[ns_id] = record
        return record

    def fail(self, operation: str, status: int, body: str) -> None:
        self._failures[operation] = (status, body)

    def by_name(self, name: str) -> Optional[dict]:
        return next((ns for ns in self.namespaces.values() if ns["name"] == name), None)

    def calls_of(self, operation: str) -> List[Tuple[str, str, object]]:
        return [c for c in self.calls if c[0] == operation]

    @property
    def mutating_calls(self) -> List[Tuple[str, str, object]]:
        return [c for c in self.calls if c[0] in ("create", "update")]

    def _new_id(self) -> str:
        ns_id = f"ns{self._next_id:04d}"
        self._next_id += 1
        return ns_id

    def _injected(self, operation: str) -> Optional[Response]:
        if operation not in self._failures:
            return None
        status, body = self._failures[operation]
        return Response(content=body, status_code=status, media_type="application/json")

    # --- App ---

    def app(self) -> FastAPI:
        app = FastAPI()

        @app.get(NAMESPACES)
        def list_namespaces(account_id: str):
            self.calls.append(("list", account_id, None))
            injected = self._injected("list")
            if injected is not None:
                return injected
            return _envelope(list(self.namespaces.values()))

        @app.post(NAMESPACES)
        def create_namespace(account_id: str, body: dict = Body(...)):
            self.calls.append(("create", account_id, body))
            injected = self._injected("create")
            if injected is not None:
                return injected
            if self.by_name(body.get("name", "")) is not None:
                return _error(409, 10074, "a namespace with this name already exists")
            return _envelope(self.seed(
                body["name"], script=body.get("script"), class_name=body.get("class"),
            ))

        @app.put(NAMESPACES + "/{namespace_id}")
        def update_namespace(account_id: str, namespace_id: str, body: dict = Body(...)):
            self.calls.append(("update", account_id, {"id": namespace_id, **body}))
            injected = self._injected("update")
            if injected is not None:
                return injected
            record = self.namespaces.get(namespace_id)
            if record is None:
                return _error(404, 10066, "namespace not found")
            record["script"] = body.get("script")
            record["class"] = body.get("class")
            return _envelope(record)

        @app.put("/accounts/{account_id}/workers/scripts/{script_name}/schedules")
        def update_schedules(
            account_id: str, script_name: str, body: List[dict] = Body(...)
        ):
            self.calls.append(("schedules", account_id, body))
            injected = self._injected("schedules")
            if injected is not None:
                return injected
            self.schedules[script_name] = [item["cron"] for item in body]
            return _envelope({
                "schedules": [{"cron": cron} for cron in self.schedules[script_name]],
            })

        return app


@pytest.fixture
def control_plane():
    return FakeControlPlane()


@pytest.fixture
def client(control_plane):
    with TestClient(control_plane.app()) as http:
        yield ControlPlaneClient(http)


@pytest.fixture
def clean_root_logger():
    """Undo init_logger: drop the handlers it attached and its init flag."""
    root = logging.getLogger()
    level = root.level
    yield root
    for h in list(root.handlers):
        if isinstance(h, RotatingFileHandler) or isinstance(h.formatter, LevelColorFormatter):
            root.removeHandler(h)
            h.close()
    root.setLevel(level)
    if hasattr(root, "_durable_deploy_inited"):
        del root._durable_deploy_inited
