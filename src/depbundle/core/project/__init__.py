"""Projects: the model, ``project.yaml`` loading, and reference lookup."""

from depbundle.core.project.loader import (
    PROJECT_FILE_NAME,
    load_project,
    normalize_project_dir,
)
from depbundle.core.project.models import ManifestWarning, Project
from depbundle.core.project.resolver import ProjectResolver

__all__ = [
    "PROJECT_FILE_NAME",
    "ManifestWarning",
    "Project",
    "ProjectResolver",
    "load_project",
    "normalize_project_dir",
]
