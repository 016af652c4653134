"""Projects Module (``tooling_modules.projects``): customer tooling projects."""

from tooling_modules.projects.models import Project, ProjectStatus
from tooling_modules.projects.service import ProjectService

__all__ = ["Project", "ProjectService", "ProjectStatus"]
