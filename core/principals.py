"""
Authenticated callers.

An access token resolves to exactly one principal type, decided once at the
authentication boundary from the account's role. Permission classes and
views dispatch on the principal type instead of inspecting the account.
"""
from dataclasses import dataclass

from django.core.exceptions import ObjectDoesNotExist
from rest_framework.exceptions import AuthenticationFailed

from core.choices import UserRoleChoices


@dataclass(frozen=True)
class Principal:
    account: object

    is_authenticated = True
    is_anonymous = False
    role = None

    @property
    def id(self):
        return self.account.id

    @property
    def pk(self):
        return self.account.pk

    @property
    def email(self):
        return self.account.email

    @property
    def tenant_id(self):
        return None


@dataclass(frozen=True)
class UserPrincipal(Principal):
    role = UserRoleChoices.USER


@dataclass(frozen=True)
class MerchantPrincipal(Principal):
    merchant: object

    role = UserRoleChoices.MERCHANT

    @property
    def tenant_id(self):
        return self.merchant.id


@dataclass(frozen=True)
class AdminPrincipal(Principal):
    role = UserRoleChoices.ADMIN


def resolve_principal(account):
    if account.role == UserRoleChoices.ADMIN:
        return AdminPrincipal(account)

    if account.role == UserRoleChoices.MERCHANT:
        try:
            merchant = account.merchant_profile
        except ObjectDoesNotExist:
            raise AuthenticationFailed("Merchant profile not found.", code="merchant_not_found")
        return MerchantPrincipal(account, merchant)

    return UserPrincipal(account)
