"""
Role-based permission classes shared by the market apps.

Permission Classes:
    IsAdminRole - Admin accounts only
    IsChairmanOrAdmin - Market chairmen and admins
    IsLevyCollector - Anyone allowed to record a levy payment

Usage:
    from apps.accounts.permissions import IsChairmanOrAdmin

    @api_view(['GET'])
    @permission_classes([IsAuthenticated, IsChairmanOrAdmin])
    def dashboard(request):
        ...
"""

from rest_framework.permissions import BasePermission
from .models import UserRole


class RolePermission(BasePermission):
    """
    Allow access when the user's role is in ``allowed_roles``.

    Superusers always pass.
    """

    allowed_roles = ()
    message = 'Your role does not allow this action.'

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if user.is_superuser:
            return True
        return user.role in self.allowed_roles


class IsAdminRole(RolePermission):
    allowed_roles = (UserRole.ADMIN,)
    message = 'Only administrators can perform this action.'


class IsChairmanOrAdmin(RolePermission):
    allowed_roles = (UserRole.ADMIN, UserRole.CHAIRMAN)
    message = 'Only chairmen and administrators can perform this action.'


class IsLevyCollector(RolePermission):
    allowed_roles = (
        UserRole.ADMIN,
        UserRole.CHAIRMAN,
        UserRole.CARETAKER,
        UserRole.GOODBOY,
    )
    message = 'Only levy collectors can record payments.'
