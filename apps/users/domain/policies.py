"""
Authorization Policy

A single pure predicate decides whether an actor may perform an action on
a resource. Use cases build the Resource from the entities they loaded and
call ``authorize``; nothing here touches storage.
"""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from apps.users.domain.entities import ActingUser, Role
from shared.domain.exceptions import UnauthorizedError


class Action(Enum):
    # Bookings
    REQUEST_BOOKING = 'request_booking'
    VIEW_BOOKING = 'view_booking'
    CONFIRM_BOOKING = 'confirm_booking'
    CANCEL_BOOKING = 'cancel_booking'
    COMPLETE_BOOKING = 'complete_booking'

    # Listings and calendars
    CREATE_LISTING = 'create_listing'
    MANAGE_LISTING = 'manage_listing'
    MODERATE_LISTING = 'moderate_listing'

    # Users
    VIEW_USER = 'view_user'
    UPDATE_USER = 'update_user'
    DELETE_USER = 'delete_user'
    CHANGE_ROLE = 'change_role'
    GRANT_ADMIN = 'grant_admin'
    LIST_USERS = 'list_users'
    BAN_USER = 'ban_user'


@dataclass(frozen=True)
class Resource:
    """
    What an action targets, reduced to the ids that matter for access

    owner_id: the user the resource belongs to (booking guest, account,
              host a listing is created for)
    host_id:  the host of the listing involved, if any
    """
    owner_id: UUID | None = None
    host_id: UUID | None = None

    @classmethod
    def for_booking(cls, booking, listing=None) -> 'Resource':
        return cls(owner_id=booking.user_id, host_id=listing.host_id if listing else None)

    @classmethod
    def for_listing(cls, listing) -> 'Resource':
        return cls(owner_id=listing.host_id, host_id=listing.host_id)

    @classmethod
    def for_user(cls, user_id: UUID) -> 'Resource':
        return cls(owner_id=user_id)


ADMIN_ONLY = frozenset({
    Action.COMPLETE_BOOKING,
    Action.MODERATE_LISTING,
    Action.GRANT_ADMIN,
    Action.LIST_USERS,
    Action.BAN_USER,
})

SELF_OR_ADMIN = frozenset({
    Action.REQUEST_BOOKING,
    Action.VIEW_USER,
    Action.UPDATE_USER,
    Action.DELETE_USER,
    Action.CHANGE_ROLE,
})


def _is_listing_host(actor: ActingUser, resource: Resource) -> bool:
    return (
        actor.role is Role.HOST
        and resource.host_id is not None
        and actor.id == resource.host_id
    )


def is_authorized(actor: ActingUser, resource: Resource, action: Action) -> bool:
    """Pure access decision over (actor, resource, action)"""
    if actor.is_admin:
        return True

    if action in ADMIN_ONLY:
        return False

    if action in SELF_OR_ADMIN:
        return resource.owner_id is not None and actor.id == resource.owner_id

    if action is Action.CONFIRM_BOOKING:
        return _is_listing_host(actor, resource)

    if action in (Action.VIEW_BOOKING, Action.CANCEL_BOOKING):
        return actor.id == resource.owner_id or _is_listing_host(actor, resource)

    if action is Action.CREATE_LISTING:
        return actor.role is Role.HOST and actor.id == resource.owner_id

    if action is Action.MANAGE_LISTING:
        return _is_listing_host(actor, resource)

    return False


def authorize(actor: ActingUser, resource: Resource, action: Action):
    """Raise UnauthorizedError unless is_authorized allows the action"""
    if not is_authorized(actor, resource, action):
        raise UnauthorizedError(
            f"User {actor.id} ({actor.role.value}) may not {action.value.replace('_', ' ')}"
        )
