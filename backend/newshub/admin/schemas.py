from typing import List

from ..models import CustomModel
from ..users.schema import UserOut


class AdminStats(CustomModel):
    total_users: int
    total_news: int
    pending_moderation: int


class UserPage(CustomModel):
    users: List[UserOut]
    total_pages: int
    current_page: int


class RoleResult(CustomModel):
    message: str
    user: UserOut
