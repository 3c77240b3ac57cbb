"""
Shared fixtures: sample Aspect Models and workspaces built from them.
"""

import io
from pathlib import Path
import zipfile

import pytest

from aspect_workspace.adapters import (
    MetaModelUpgrader,
    ReferenceValidator,
    TurtleDocumentLoader,
    TurtleSerializer,
)
from aspect_workspace.utils.archive import PackageArchiver

NAMESPACE = "com.example"
VERSION = "1.0.0"

FOO_URN = f"urn:samm:{NAMESPACE}:{VERSION}#Foo"
BAR_URN = f"urn:samm:{NAMESPACE}:{VERSION}#bar"

FOO_TTL = b"""@prefix samm: <urn:samm:org.eclipse.esmf.samm:meta-model:2.1.0#> .
@prefix : <urn:samm:com.example:1.0.0#> .

:Foo a samm:Aspect ;
   samm:preferredName "Foo"@en ;
   samm:properties ( :bar ) ;
   samm:operations ( ) .
"""

BAR_TTL = b"""@prefix samm: <urn:samm:org.eclipse.esmf.samm:meta-model:2.1.0#> .
@prefix samm-c: <urn:samm:org.eclipse.esmf.samm:characteristic:2.1.0#> .
@prefix : <urn:samm:com.example:1.0.0#> .

:bar a samm:Property ;
   samm:characteristic samm-c:Text .
"""

LEGACY_TTL = b"""@prefix bamm: <urn:bamm:io.openmanufacturing:meta-model:2.0.0#> .
@prefix bamm-c: <urn:bamm:io.openmanufacturing:characteristic:2.0.0#> .
@prefix : <urn:bamm:com.example:1.0.0#> .

:Legacy a bamm:Aspect ;
   bamm:properties ( :speed ) ;
   bamm:operations ( ) .

:speed a bamm:Property ;
   bamm:characteristic bamm-c:Text .
"""

FUTURE_TTL = b"""@prefix samm: <urn:samm:org.eclipse.esmf.samm:meta-model:9.0.0#> .
@prefix : <urn:samm:com.example:1.0.0#> .

:Future a samm:Aspect .
"""

EMPTY_TTL = b"@prefix ex: <http://example.com#> .\n"


def make_zip(entries: dict[str, bytes]) -> bytes:
    """Build an archive without any of the archiver's checks."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in entries.items():
            zf.writestr(name, content)
    return buffer.getvalue()


def write_model(root: Path, namespace: str, version: str, name: str, content: bytes) -> Path:
    """Write a model file at its canonical workspace location."""
    path = root / namespace / version / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


@pytest.fixture
def workspace(tmp_path) -> Path:
    """An empty workspace root."""
    root = tmp_path / "models"
    root.mkdir()
    return root


@pytest.fixture
def populated_workspace(workspace) -> Path:
    """A workspace holding Foo.ttl and the Bar.ttl it references."""
    write_model(workspace, NAMESPACE, VERSION, "Foo.ttl", FOO_TTL)
    write_model(workspace, NAMESPACE, VERSION, "Bar.ttl", BAR_TTL)
    return workspace


@pytest.fixture
def archiver() -> PackageArchiver:
    return PackageArchiver()


@pytest.fixture
def loader() -> TurtleDocumentLoader:
    return TurtleDocumentLoader()


@pytest.fixture
def validator() -> ReferenceValidator:
    return ReferenceValidator()


@pytest.fixture
def upgrader() -> MetaModelUpgrader:
    return MetaModelUpgrader()


@pytest.fixture
def serializer() -> TurtleSerializer:
    return TurtleSerializer()
