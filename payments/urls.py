from django.urls import path
from payments.views import (
    PayPalPaymentCreateAPIView, PayPalSuccessAPIView, PayPalCancelAPIView,
    SubscriptionOrderCreateAPIView, SubscriptionPaymentVerifyAPIView,
    PaymentListAPIView, ReconciliationEventListAPIView,
)


urlpatterns = [
    path("payments/", PaymentListAPIView.as_view(), name="payment-list"),
    path("payments/pay/", PayPalPaymentCreateAPIView.as_view(), name="payment-create"),
    path("payments/success/", PayPalSuccessAPIView.as_view(), name="payment-success"),
    path("payments/cancel/", PayPalCancelAPIView.as_view(), name="payment-cancel"),
    path("payments/subscription-orders/", SubscriptionOrderCreateAPIView.as_view(), name="subscription-orders"),
    path("payments/subscription-orders/verify/", SubscriptionPaymentVerifyAPIView.as_view(), name="subscription-verify"),
    path("payments/reconciliation-events/", ReconciliationEventListAPIView.as_view(), name="reconciliation-events"),
]
