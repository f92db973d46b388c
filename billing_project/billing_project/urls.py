from django.contrib import admin
from django.urls import path

# HTTP API lives outside this project; only the admin site is mounted here
urlpatterns = [
    path("admin/", admin.site.urls),
]
