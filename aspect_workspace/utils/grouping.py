"""
Namespace grouping of model file locations.

Turns a flat list of workspace paths into the namespace -> versions -> models
view returned by the import and listing endpoints. The grouping is computed
per request and never cached.
"""

from collections import defaultdict
from collections.abc import Callable, Iterable
from pathlib import Path

from aspect_workspace.schemas.grouping import ModelEntry, NamespaceGrouping, VersionGroup
from aspect_workspace.utils.urn import version_sort_key


def group_models_by_namespace(
    paths: Iterable[Path],
    root: Path,
    exists: Callable[[Path], bool] | None = None,
) -> NamespaceGrouping:
    """
    Group model paths by namespace and version.

    Paths may be absolute or relative to ``root``; anything not exactly three
    levels below the root is ignored. ``existing`` reflects whether the file
    is present at the time of the call, as reported by ``exists`` (a check on
    the file system by default).

    Returns:
        Mapping of namespace to its versions, namespaces sorted
        lexicographically, versions by semantic version and models by name.
    """
    root = Path(root)
    exists = exists or Path.exists
    tree: dict[str, dict[str, dict[str, bool]]] = defaultdict(lambda: defaultdict(dict))

    for path in paths:
        parts = _relative_parts(Path(path), root)
        if parts is None:
            continue
        namespace, version, filename = parts
        tree[namespace][version][filename] = exists(root / namespace / version / filename)

    return {
        namespace: [
            VersionGroup(
                version=version,
                models=[
                    ModelEntry(model=name, existing=existing)
                    for name, existing in sorted(models.items())
                ],
            )
            for version, models in sorted(
                versions.items(), key=lambda item: version_sort_key(item[0])
            )
        ]
        for namespace, versions in sorted(tree.items())
    }


def _relative_parts(path: Path, root: Path) -> tuple[str, str, str] | None:
    if path.is_absolute():
        try:
            path = path.resolve().relative_to(root.resolve())
        except ValueError:
            return None
    parts = path.parts
    if len(parts) != 3:
        return None
    return parts[0], parts[1], parts[2]
