from django.urls import path
from merchants.views import (
    MerchantListAPIView, MerchantDetailAPIView, MerchantStatusAPIView, MerchantVerificationAPIView,
    MerchantRenewAPIView, RenewalOrderCreateAPIView, RenewalVerifyAPIView,
)


urlpatterns = [
    path("merchants/", MerchantListAPIView.as_view()),
    path("merchants/renewal/orders/", RenewalOrderCreateAPIView.as_view()),
    path("merchants/renewal/verify/", RenewalVerifyAPIView.as_view()),
    path("merchants/<uuid:id>/", MerchantDetailAPIView.as_view()),
    path("merchants/<uuid:id>/status/", MerchantStatusAPIView.as_view()),
    path("merchants/<uuid:id>/verification/", MerchantVerificationAPIView.as_view()),
    path("merchants/<uuid:id>/renew/", MerchantRenewAPIView.as_view()),
]
