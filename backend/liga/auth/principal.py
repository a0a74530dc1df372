from dataclasses import dataclass

from liga.models.user import UserRole


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, handed explicitly to service functions."""

    user_id: int
    role: UserRole

    @classmethod
    def from_user(cls, user):
        return cls(user_id=user.id, role=user.role)

    @property
    def is_admin(self):
        return self.role == UserRole.ADMIN

    @property
    def is_captain(self):
        return self.role in (UserRole.CAPTAIN, UserRole.ADMIN)
