"""Root URL configuration for autolinker_site."""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('admin/', admin.site.urls),
    path('', include('autolinker.urls')),
]
