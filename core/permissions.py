from rest_framework.permissions import BasePermission, SAFE_METHODS
from core.principals import AdminPrincipal, MerchantPrincipal, UserPrincipal


class IsAdmin(BasePermission):
    """
    Allows access only to administrators.
    """

    def has_permission(self, request, view):
        return isinstance(request.user, AdminPrincipal)


class IsMerchant(BasePermission):
    """
    Allows access only to merchant accounts.
    """
    message = "Not authorized as a merchant."

    def has_permission(self, request, view):
        return isinstance(request.user, MerchantPrincipal)


class IsApprovedMerchant(IsMerchant):
    """
    Merchant accounts whose application has been approved.
    """
    message = "Merchant account is not approved."

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False
        return request.user.merchant.is_approved


class IsEndUser(BasePermission):
    """
    Allows access only to end users (plan subscribers).
    """

    def has_permission(self, request, view):
        return isinstance(request.user, UserPrincipal)


class IsMerchantSelfOrAdmin(BasePermission):
    """
    obj - Merchant

    ADMIN:
        - any merchant
    MERCHANT:
        - only their own profile
    """

    def has_object_permission(self, request, view, obj):
        principal = request.user

        if isinstance(principal, AdminPrincipal):
            return True

        if isinstance(principal, MerchantPrincipal):
            return principal.merchant.id == obj.id

        return False


class IsChitPlanOwnerOrReadOnly(BasePermission):
    """
    obj - ChitPlan

    Anyone may read. Only the issuing merchant may modify or delete.
    """
    message = "Not authorized to modify this plan."

    def has_object_permission(self, request, view, obj):
        if request.method in SAFE_METHODS:
            return True

        principal = request.user
        if isinstance(principal, MerchantPrincipal):
            return obj.merchant_id == principal.merchant.id

        return False
