from acrossmedia.models.admin import Admin, AdminRole, AdminStatus
from acrossmedia.models.video import Video
from acrossmedia.models.project import Project, ProjectStatus
from acrossmedia.models.site_setting import SiteSetting

__all__ = [
    "Admin", "AdminRole", "AdminStatus", "Video", "Project", "ProjectStatus", "SiteSetting",
]
