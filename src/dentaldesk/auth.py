"""Login session and role checks."""

import logging

from pydantic import ValidationError

from dentaldesk.database import MockDatabase
from dentaldesk.exceptions import AuthorizationError, StorageError
from dentaldesk.storage import USER_KEY
from dentaldesk.types import Role, User

_LOGGER = logging.getLogger(__name__)


class Session:
    """The signed-in user, persisted under the ``dental_user`` key.

    Example:
        >>> session = Session(db)
        >>> await session.login("admin@entnt.in", "admin123")
        True
        >>> session.is_admin
        True
    """

    def __init__(self, database: MockDatabase, *, logger: logging.Logger | None = None):
        self._database = database
        self._user: User | None = None
        self._logger = logger or _LOGGER

    @property
    def user(self) -> User | None:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    @property
    def is_admin(self) -> bool:
        return self._user is not None and self._user.role == Role.ADMIN

    def restore(self) -> User | None:
        """Load a previously saved user, discarding it if it cannot be parsed."""
        raw = self._database.store.get_item(USER_KEY)
        if raw is None:
            self._user = None
            return None
        try:
            self._user = User.model_validate_json(raw)
        except ValidationError:
            self._logger.error("Failed to parse saved user, signing out")
            self._database.store.remove_item(USER_KEY)
            self._user = None
        return self._user

    async def login(self, email: str, password: str) -> bool:
        user = await self._database.authenticate_user(email, password)
        if user is None:
            return False
        try:
            self._database.store.set_item(
                USER_KEY, user.model_dump_json(by_alias=True)
            )
        except StorageError:
            self._logger.exception("Authentication error")
            return False
        self._user = user
        self._logger.info("Signed in %s as %s", user.email, user.role.value)
        return True

    def logout(self) -> None:
        self._user = None
        self._database.store.remove_item(USER_KEY)


def can_access_patient(user: User | None, patient_id: str) -> bool:
    """Admins see every patient; a patient only sees their own record."""
    if user is None:
        return False
    if user.role == Role.ADMIN:
        return True
    return user.patient_id == patient_id


def require_role(user: User | None, role: Role) -> User:
    if user is None:
        raise AuthorizationError("Not signed in")
    if user.role != role:
        raise AuthorizationError(
            f"{role.value} role required, signed in as {user.role.value}"
        )
    return user
