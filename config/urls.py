from django.urls import path, include

handler404 = "core.exceptions.custom_404_handler"

urlpatterns = [
    path("api/v1/", include("users.urls")),
    path("api/v1/", include("merchants.urls")),
    path("api/v1/", include("chit_plans.urls")),
    path("api/v1/", include("payments.urls")),
]
