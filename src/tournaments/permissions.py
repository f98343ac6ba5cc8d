from dataclasses import dataclass, field
from typing import Optional, Set

from fastapi import Request

from settings import TOURNAMENT_ADMINS
from tournaments.exceptions import PermissionDenied

CREATE_TOURNAMENTS = "create_tournaments"
DELETE_TOURNAMENTS = "delete_tournaments"
MODIFY_TOURNAMENTS = "modify_tournaments"


@dataclass
class User:
    id: str
    permissions: Set[str] = field(default_factory=set)


class PermissionChecker:
    """Grants tournament management to the configured admin ids."""

    def __init__(self, admins: Optional[Set[str]] = None):
        self.admins = TOURNAMENT_ADMINS if admins is None else admins

    def check(self, user: User, action: str):
        if action in user.permissions:
            return
        if "*" in self.admins or user.id in self.admins:
            return
        raise PermissionDenied(user.id, action)


def get_current_user(request: Request) -> User:
    return User(id=request.headers.get("X-User-Id", "anonymous"))


def get_permission_checker() -> PermissionChecker:
    return PermissionChecker()
