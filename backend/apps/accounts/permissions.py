from rest_framework import permissions

from .policy import Action, can


# ----------------------------------------------------------------------
# Role‑based permissions (thin DRF adapters over the access policy)
# ----------------------------------------------------------------------
class IsAdmin(permissions.BasePermission):
    """
    Permission check for Admin users.
    """
    message = 'Admin access required.'

    def has_permission(self, request, view):
        return can(request.user, Action.VIEW_ALL_ROWS)



class HasPolicyAction(permissions.BasePermission):
    """
    Maps the viewset action onto a policy action through `policy_actions`
    on the view. Unmapped actions are refused.
    """
    message = 'Admin access required.'

    def has_permission(self, request, view):
        action = getattr(view, 'policy_actions', {}).get(getattr(view, 'action', None))
        return action is not None and can(request.user, action)
