from django.urls import path
from . import views

app_name = "core"

urlpatterns = [
    # Public
    path("plans/", views.plan_list, name="plan-list"),

    # Company (authenticated)
    path("company/", views.get_my_company, name="my-company"),
    path("employees/", views.employees, name="employee-list-create"),

    # Platform owner
    path("companies/", views.company_list, name="company-list"),
    path(
        "companies/<uuid:company_id>/subscription/",
        views.change_subscription,
        name="company-subscription",
    ),
]
