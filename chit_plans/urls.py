from django.urls import path
from chit_plans.views import (
    ChitPlanListCreateAPIView, MerchantChitPlanListAPIView, ChitPlanDetailAPIView, ChitPlanSubscribeAPIView,
)


urlpatterns = [
    path("chit-plans/", ChitPlanListCreateAPIView.as_view()),
    path("chit-plans/merchant/<uuid:merchant_id>/", MerchantChitPlanListAPIView.as_view()),
    path("chit-plans/<uuid:id>/", ChitPlanDetailAPIView.as_view()),
    path("chit-plans/<uuid:id>/subscribe/", ChitPlanSubscribeAPIView.as_view()),
]
