# project/urls.py

from django.contrib import admin
from django.urls import include, path
from django.views.generic import RedirectView


urlpatterns = [
    path("admin/", admin.site.urls),
    path("", RedirectView.as_view(pattern_name="invoicing:dashboard", permanent=False), name="home"),
    path("accounts/", include("django.contrib.auth.urls")),
    path("invoicing/", include(("invoicing.urls", "invoicing"), namespace="invoicing")),
]
