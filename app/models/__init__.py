from app.models.vehicle import Vehicle
from app.models.task import Task
from app.models.team_member import TeamMember
from app.models.location import Location
from app.models.comment import Comment
from app.models.project_settings import ProjectSettings
from app.models.share_link import ShareLink

__all__ = ["Vehicle", "Task", "TeamMember", "Location", "Comment", "ProjectSettings", "ShareLink"]
