"""Root URL configuration for TeamUp."""

from django.contrib import admin
from django.urls import include, path
from drf_yasg import openapi
from drf_yasg.views import get_schema_view
from rest_framework import permissions

from accounts.urls import profile_urlpatterns

schema_view = get_schema_view(
    openapi.Info(
        title="TeamUp API",
        default_version="v1",
        description="Team formation: create teams, apply, accept or reject applicants.",
    ),
    public=True,
    permission_classes=[permissions.AllowAny],
)

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/auth/", include("accounts.urls")),
    path("api/user/", include(profile_urlpatterns)),
    path("api/", include("teams.urls")),
    path("api/docs/", schema_view.with_ui("swagger", cache_timeout=0), name="schema-swagger-ui"),
]
