from django.urls import path
from . import views

app_name = "entitlements"

urlpatterns = [
    path("permissions/", views.my_permissions, name="permissions"),
    path("route/", views.route_access, name="route-access"),
    path("navigation/", views.navigation, name="navigation"),
    path("features/", views.features, name="features"),
    path("features/<str:feature_key>/", views.feature_detail, name="feature-detail"),
]
