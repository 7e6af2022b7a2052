"""
Authorization matrix

Maps (actor role, relationship to the reservation, requested action) to
allow/deny:

- ADMIN may move a reservation to any status
- ROOM_OWNER of the reservation's room may confirm, cancel or complete it
- REQUESTER of the reservation may only cancel it
- anyone else is refused

Deleting a reservation is a separate action reserved to its requester.
"""

from dataclasses import dataclass
from enum import Enum

from reservation_engine.errors import Forbidden
from reservation_engine.status import Status


class Role(str, Enum):
    REQUESTER = "REQUESTER"
    ROOM_OWNER = "ROOM_OWNER"
    ADMIN = "ADMIN"


@dataclass(frozen=True)
class Actor:
    id: str
    role: Role

    def __post_init__(self):
        if not isinstance(self.role, Role):
            object.__setattr__(self, "role", Role(self.role))

    def __str__(self):
        return f"{self.role.value}:{self.id}"


@dataclass(frozen=True)
class Relationship:
    """How an actor relates to one reservation."""
    is_requester: bool = False
    is_room_owner: bool = False

    @classmethod
    def between(cls, actor: Actor, requester_id: str | None, owner_user_id: str | None) -> "Relationship":
        return cls(
            is_requester=requester_id is not None and actor.id == requester_id,
            is_room_owner=owner_user_id is not None and actor.id == owner_user_id,
        )


ALLOWED_TARGETS: dict[Role, frozenset[Status]] = {
    Role.ADMIN: frozenset(Status),
    Role.ROOM_OWNER: frozenset({Status.CONFIRMED, Status.CANCELLED, Status.COMPLETED}),
    Role.REQUESTER: frozenset({Status.CANCELLED}),
}


def is_stakeholder(actor: Actor, relationship: Relationship) -> bool:
    """True when the actor acts in a role that actually applies to this reservation."""
    if actor.role is Role.ADMIN:
        return True
    if actor.role is Role.ROOM_OWNER:
        return relationship.is_room_owner
    if actor.role is Role.REQUESTER:
        return relationship.is_requester
    raise ValueError(f"Unhandled role: {actor.role!r}")


def allowed_targets(actor: Actor, relationship: Relationship) -> frozenset[Status]:
    if not is_stakeholder(actor, relationship):
        return frozenset()
    return ALLOWED_TARGETS[actor.role]


def authorize_transition(actor: Actor, relationship: Relationship, target: Status) -> None:
    if target not in allowed_targets(actor, relationship):
        raise Forbidden(f"{actor.role.value} cannot set this reservation to {target.value}.")


def can_view(actor: Actor, relationship: Relationship) -> bool:
    return is_stakeholder(actor, relationship)


def authorize_deletion(relationship: Relationship) -> None:
    if not relationship.is_requester:
        raise Forbidden("Only the requester can delete a reservation.")


def can_manage_room(actor: Actor, owner_user_id: str | None) -> bool:
    if actor.role is Role.ADMIN:
        return True
    return actor.role is Role.ROOM_OWNER and owner_user_id is not None and actor.id == owner_user_id
