"""Durable Object namespaces — remote records and declared intent."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class NamespaceRecord(BaseModel):
    """A namespace as observed on the control plane."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    name: str
    id: str = Field(min_length=1)           # Assigned by the control plane
    script: Optional[str] = None            # None while still a placeholder
    class_name: Optional[str] = Field(default=None, alias="class")

    @property
    def is_placeholder(self) -> bool:
        return self.script is None and self.class_name is None

    def implemented_by(self, script: str, class_name: str) -> bool:
        """True if this record already points at the given script and class."""
        return self.script == script and self.class_name == class_name


class ImplementedNamespace(BaseModel):
    """A namespace the script declares it implements with one of its classes."""

    model_config = ConfigDict(frozen=True)

    namespace_name: str = Field(min_length=1)
    class_name: str = Field(min_length=1)

    @classmethod
    def for_class(cls, script_name: str, class_name: str) -> "ImplementedNamespace":
        """Declare a class whose namespace takes the default "<script>-<class>" name."""
        return cls(namespace_name=f"{script_name}-{class_name}", class_name=class_name)


class UsedBinding(BaseModel):
    """
    A namespace the script binds to.

    Either the namespace id is given up front, or a namespace name is given
    and the reconciler fills in the id before upload.
    """

    binding: str = Field(min_length=1)      # Variable name exposed to the script
    namespace_name: Optional[str] = None
    namespace_id: Optional[str] = None

    @model_validator(mode="after")
    def _check_target(self) -> "UsedBinding":
        if not self.namespace_name and not self.namespace_id:
            raise ValueError(
                f"binding {self.binding!r} must declare a namespace_name or a namespace_id"
            )
        return self

    @property
    def resolved(self) -> bool:
        return bool(self.namespace_id)
