"""
Access policy for the Subscription Platform.

Authorization is a pure function of the actor's role and, for owned
records, of who owns the target. Each role maps to a fixed capability set;
checks look up the capability instead of comparing role strings at call
sites.

    authorize(user, Action.DELETE_PACKAGE)               # admin only
    authorize(user, Action.VIEW_MEMBERSHIP, owner=m.user) # admin or owner
    scope_to_actor(user, Membership.objects.all())       # rows visible to user
"""
from enum import Enum

from backend.core.exceptions import Forbidden

from .models import User


class Action(str, Enum):
    CREATE_PACKAGE = "create_package"
    UPDATE_PACKAGE = "update_package"
    DELETE_PACKAGE = "delete_package"
    LIST_PACKAGES = "list_packages"
    UPDATE_MEMBERSHIP = "update_membership"
    DELETE_MEMBERSHIP = "delete_membership"
    VIEW_MEMBERSHIP = "view_membership"
    VIEW_TRANSACTION = "view_transaction"
    VIEW_ALL_ROWS = "view_all_rows"
    VIEW_ADMIN_DASHBOARD = "view_admin_dashboard"
    CHECKOUT = "checkout"


# Actions a member may only perform on records they own
OWNED_ACTIONS = frozenset({
    Action.VIEW_MEMBERSHIP,
    Action.VIEW_TRANSACTION,
})

ROLE_CAPABILITIES = {
    User.Role.ADMIN: frozenset(Action),
    User.Role.MEMBER: frozenset({
        Action.VIEW_MEMBERSHIP,
        Action.VIEW_TRANSACTION,
        Action.CHECKOUT,
    }),
}

# Capabilities that grant access regardless of ownership
UNRESTRICTED = {
    User.Role.ADMIN: frozenset(Action),
    User.Role.MEMBER: frozenset({Action.CHECKOUT}),
}


def _role_of(user):
    if user is None or not getattr(user, "is_authenticated", False):
        return None
    try:
        return User.Role(user.role)
    except ValueError:
        return None


def can(user, action: Action, owner=None) -> bool:
    """
    True when `user` may perform `action`. For owned actions the member
    must also be `owner` (a User instance or primary key).
    """
    role = _role_of(user)
    if role is None:
        return False
    if action not in ROLE_CAPABILITIES[role]:
        return False
    if action in UNRESTRICTED[role] or action not in OWNED_ACTIONS:
        return True
    owner_pk = getattr(owner, "pk", owner)
    return owner_pk is not None and owner_pk == user.pk


def authorize(user, action: Action, owner=None, message=None):
    """Raise Forbidden unless `can(user, action, owner)`."""
    if not can(user, action, owner):
        raise Forbidden(message) if message else Forbidden()


def scope_to_actor(user, queryset, owner_field="user"):
    """Admins see every row; everyone else only the rows they own."""
    if can(user, Action.VIEW_ALL_ROWS):
        return queryset
    if _role_of(user) is None:
        return queryset.none()
    return queryset.filter(**{owner_field: user})
