from ai_visibility.models.account import Account
from ai_visibility.models.competitor import Competitor
from ai_visibility.models.discovered_link import DiscoveredLink
from ai_visibility.models.project import Project
from ai_visibility.models.user import User
from ai_visibility.models.visibility_check import VisibilityCheck

__all__ = [
    "Account",
    "Competitor",
    "DiscoveredLink",
    "Project",
    "User",
    "VisibilityCheck",
]
