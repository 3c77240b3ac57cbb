"""
Aspect Model URN parsing.

Model elements are identified by ``urn:samm:<namespace>:<version>#<name>``.
Meta-model URNs carry an additional element-type segment
(``urn:samm:org.eclipse.esmf.samm:meta-model:2.1.0#Aspect``) and are never
treated as model identities.
"""

import re
from dataclasses import dataclass

from aspect_workspace.exceptions import InvalidIdentity

URN_PREFIXES = ("samm", "bamm")
META_MODEL_ELEMENT_TYPES = ("meta-model", "characteristic", "entity", "unit")

_URN_PATTERN = re.compile(
    r"^urn:(?P<prefix>samm|bamm):"
    r"(?P<namespace>[A-Za-z0-9][A-Za-z0-9._-]*):"
    r"(?:(?P<element_type>meta-model|characteristic|entity|unit):)?"
    r"(?P<version>\d+\.\d+\.\d+)#"
    r"(?P<name>[A-Za-z0-9_-]*)$"
)


@dataclass(frozen=True, order=True)
class ModelUrn:
    """Immutable (namespace, version, name) triple of a model element."""

    namespace: str
    version: str
    name: str
    prefix: str = "samm"

    @classmethod
    def parse(cls, value: str) -> "ModelUrn":
        """
        Parse a model element URN.

        Raises:
            InvalidIdentity: If the value is not a model element URN.
        """
        match = _URN_PATTERN.match(str(value).strip())
        if not match or match.group("element_type") or not match.group("name"):
            raise InvalidIdentity(f"Not a valid Aspect Model URN: {value}")
        return cls(
            namespace=match.group("namespace"),
            version=match.group("version"),
            name=match.group("name"),
            prefix=match.group("prefix"),
        )

    @classmethod
    def try_parse(cls, value: str) -> "ModelUrn | None":
        try:
            return cls.parse(value)
        except InvalidIdentity:
            return None

    @property
    def namespace_urn(self) -> str:
        """The URN prefix shared by all elements of this namespace and version."""
        return f"urn:{self.prefix}:{self.namespace}:{self.version}#"

    @property
    def versioned_namespace(self) -> str:
        return f"{self.namespace}:{self.version}"

    def with_version(self, version: str) -> "ModelUrn":
        return ModelUrn(self.namespace, version, self.name, self.prefix)

    def __str__(self) -> str:
        return f"{self.namespace_urn}{self.name}"


def parse_meta_model_urn(value: str) -> tuple[str, str, str, str] | None:
    """
    Split a meta-model URN into (prefix, namespace, element type, version).

    Returns None for anything that is not a meta-model URN.
    """
    match = _URN_PATTERN.match(str(value).strip())
    if not match or not match.group("element_type"):
        return None
    return (
        match.group("prefix"),
        match.group("namespace"),
        match.group("element_type"),
        match.group("version"),
    )


def bump_major_version(version: str) -> str:
    """Return the next major semantic version: ``1.2.3`` becomes ``2.0.0``."""
    parts = version.split(".")
    if not parts or not parts[0].isdigit():
        raise InvalidIdentity(f"Not a semantic version: {version}")
    return f"{int(parts[0]) + 1}.0.0"


def version_sort_key(version: str) -> list[tuple[int, int | str]]:
    """Sort key ordering versions numerically per dotted segment."""
    return [(0, int(part)) if part.isdigit() else (1, part) for part in version.split(".")]
