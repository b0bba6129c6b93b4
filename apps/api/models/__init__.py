"""Models package."""

from .user import User
from .social_profile import SocialProfile
from .status import Status
from .notification import Notification
