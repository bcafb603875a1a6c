"""Errors raised while deploying a script and its Durable Object namespaces."""

from typing import Optional


class DeployError(Exception):
    """Base class. Any DeployError aborts the current deployment unit."""
    pass


class RemoteError(DeployError):
    """The control plane answered with a non-success status."""

    def __init__(self, status: int, body: str, operation: str = ""):
        self.status = status
        self.body = body
        self.operation = operation
        prefix = f"{operation} failed" if operation else "Control plane request failed"
        super().__init__(f"{prefix}! Status: {status}, Details: {body}")


class MalformedResponse(DeployError):
    """A success status whose body is not the expected shape."""

    def __init__(self, operation: str, body: str, reason: str = ""):
        self.operation = operation
        self.body = body
        detail = f" ({reason})" if reason else ""
        super().__init__(
            f"{operation} returned an unreadable response{detail}: {body}"
        )


class TransportError(DeployError):
    """The request never produced a response."""

    def __init__(self, operation: str, reason: Optional[str] = None):
        self.operation = operation
        super().__init__(f"{operation} did not complete: {reason or 'transport error'}")


class NamespaceNotFound(DeployError):
    """A binding names a namespace that neither exists nor is implemented here."""

    def __init__(self, name: str, binding: Optional[str] = None):
        self.name = name
        self.binding = binding
        via = f" (bound as {binding})" if binding else ""
        super().__init__(
            f"Durable Object namespace {name!r}{via} was not found in this account "
            f"and is not implemented by this script"
        )


class ScheduleConfigError(DeployError):
    """A declared cron trigger is not a valid cron expression."""

    def __init__(self, cron: str):
        self.cron = cron
        super().__init__(f"Invalid cron expression: {cron!r}")
