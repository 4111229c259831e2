"""
Caller scope.

The role and scoping ids of the authenticated user, resolved once per
request and passed into services explicitly. Services never look at the
request themselves.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from apps.accounts.models import UserRole
from .models import Chairman, Caretaker, GoodBoy, Market, Trader


@dataclass(frozen=True)
class CallerScope:
    role: str
    user_id: Optional[UUID] = None
    market_id: Optional[UUID] = None
    chairman_id: Optional[UUID] = None
    caretaker_id: Optional[UUID] = None
    trader_id: Optional[UUID] = None
    good_boy_id: Optional[UUID] = None

    @property
    def is_admin(self):
        return self.role == UserRole.ADMIN

    def can_access_market(self, market_id):
        if self.is_admin:
            return True
        return self.market_id is not None and self.market_id == market_id

    def restrict_markets(self, queryset):
        """Limit a Market queryset to what this caller may see."""
        if self.is_admin:
            return queryset
        if self.market_id is None:
            return queryset.none()
        return queryset.filter(id=self.market_id)


def resolve_caller_scope(user) -> CallerScope:
    """Build the scope for a user from their role profile."""
    role = UserRole.ADMIN if user.is_superuser else user.role

    if role == UserRole.CHAIRMAN:
        chairman = Chairman.objects.filter(user=user).first()
        if chairman is None:
            return CallerScope(role=role, user_id=user.id)
        market_id = (
            Market.objects.filter(chairman=chairman)
            .values_list('id', flat=True)
            .first()
        )
        return CallerScope(
            role=role,
            user_id=user.id,
            chairman_id=chairman.id,
            market_id=market_id,
        )

    if role == UserRole.CARETAKER:
        caretaker = Caretaker.objects.filter(user=user).first()
        if caretaker is None:
            return CallerScope(role=role, user_id=user.id)
        return CallerScope(
            role=role,
            user_id=user.id,
            caretaker_id=caretaker.id,
            market_id=caretaker.market_id,
        )

    if role == UserRole.GOODBOY:
        good_boy = GoodBoy.objects.filter(user=user).first()
        if good_boy is None:
            return CallerScope(role=role, user_id=user.id)
        return CallerScope(
            role=role,
            user_id=user.id,
            good_boy_id=good_boy.id,
            caretaker_id=good_boy.caretaker_id,
            market_id=good_boy.market_id,
        )

    if role == UserRole.TRADER:
        trader = Trader.objects.filter(user=user).first()
        if trader is None:
            return CallerScope(role=role, user_id=user.id)
        return CallerScope(
            role=role,
            user_id=user.id,
            trader_id=trader.id,
            caretaker_id=trader.caretaker_id,
            market_id=trader.market_id,
        )

    return CallerScope(role=role, user_id=user.id)
