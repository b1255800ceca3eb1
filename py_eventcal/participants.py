"""User lookup and participant resolution.

Users live in the ``users`` collection keyed by handle; the ``uid`` field is
the identifier stored in event participant lists.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .internal import NotFoundError, PermissionDeniedError
from .storage import Store

logger = logging.getLogger(__name__)

USERS = "users"


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


@dataclass
class UserRecord:
    """A registered user."""

    uid: str
    handle: str
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def to_record(self) -> dict[str, Any]:
        return {
            "uid": self.uid,
            "handle": self.handle,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "phone": self.phone,
            "role": self.role.value,
        }

    @classmethod
    def from_record(cls, data: dict[str, Any]) -> UserRecord:
        try:
            role = Role(data.get("role") or Role.USER.value)
        except ValueError:
            role = Role.USER
        return cls(
            uid=str(data.get("uid", "")),
            handle=str(data.get("handle", "")),
            email=str(data.get("email", "")),
            first_name=str(data.get("firstName", "")),
            last_name=str(data.get("lastName", "")),
            phone=str(data.get("phone", "")),
            role=role,
        )


class UserDirectory:
    """Read access to users, plus role management for administrators."""

    def __init__(self, store: Store, collection: str = USERS) -> None:
        self.store = store
        self.collection = collection

    async def _first_match(self, field: str, value: str) -> tuple[str, UserRecord] | None:
        records = await self.store.query_by_field(self.collection, field, value)
        for key, data in records.items():
            return key, UserRecord.from_record(data)
        return None

    async def add(self, user: UserRecord) -> None:
        """Store a user under its handle."""
        await self.store.set(self.collection, user.handle, user.to_record())

    async def get_by_uid(self, uid: str) -> UserRecord | None:
        match = await self._first_match("uid", uid)
        return match[1] if match else None

    async def get_by_handle(self, handle: str) -> UserRecord | None:
        data = await self.store.get(self.collection, handle)
        return UserRecord.from_record(data) if data else None

    async def get_by_phone(self, phone: str) -> UserRecord | None:
        match = await self._first_match("phone", phone)
        return match[1] if match else None

    async def list_users(self) -> list[UserRecord]:
        records = await self.store.list(self.collection)
        return [UserRecord.from_record(data) for data in records.values()]

    async def is_admin(self, uid: str | None) -> bool:
        if not uid:
            return False
        user = await self.get_by_uid(uid)
        return user is not None and user.is_admin

    async def set_role(self, actor: str, uid: str, role: Role) -> None:
        """Change a user's role.

        Raises:
            PermissionDeniedError: If ``actor`` is not an administrator
            NotFoundError: If no user has ``uid``
        """
        if not await self.is_admin(actor):
            raise PermissionDeniedError(f"user {actor!r} may not change roles")

        match = await self._first_match("uid", uid)
        if match is None:
            raise NotFoundError("User not found")

        key, _ = match
        await self.store.update(self.collection, key, {"role": Role(role).value})
        logger.info("Role of user %s set to %s by %s", uid, Role(role).value, actor)


class ParticipantResolver:
    """Maps participant ids to user records."""

    def __init__(self, directory: UserDirectory) -> None:
        self.directory = directory

    async def _users_by_uid(self) -> dict[str, UserRecord]:
        return {user.uid: user for user in await self.directory.list_users()}

    async def resolve_many(self, ids: Iterable[str]) -> list[UserRecord]:
        """Resolve ids to users, keeping order and dropping unknown ids."""
        users = await self._users_by_uid()
        return [users[uid] for uid in ids if uid in users]

    async def unknown(self, ids: Iterable[str]) -> list[str]:
        """Return the ids that match no user, in input order."""
        users = await self._users_by_uid()
        return [uid for uid in ids if uid not in users]
