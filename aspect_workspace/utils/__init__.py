"""
Utility modules for the Aspect Model workspace.
"""

from aspect_workspace.utils.archive import PackageArchiver
from aspect_workspace.utils.paths import PathResolver
from aspect_workspace.utils.urn import ModelUrn, bump_major_version

__all__ = ["PackageArchiver", "PathResolver", "ModelUrn", "bump_major_version"]
