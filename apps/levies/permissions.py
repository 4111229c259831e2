"""
Permission classes for the levies app.

Permission Classes:
    CanConfigureLevies - Anyone signed in can read rates, chairmen/admins change them
    CanRecordLevyPayments - Collectors record, everyone signed in reads
"""

from rest_framework.permissions import SAFE_METHODS
from apps.accounts.permissions import IsChairmanOrAdmin, IsLevyCollector


class CanConfigureLevies(IsChairmanOrAdmin):
    message = 'Only chairmen and administrators can change levy rates.'

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return bool(request.user and request.user.is_authenticated)
        return super().has_permission(request, view)


class CanRecordLevyPayments(IsLevyCollector):

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return bool(request.user and request.user.is_authenticated)
        return super().has_permission(request, view)
