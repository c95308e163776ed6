"""URL configuration for the spa marketplace.

The `urlpatterns` list routes URLs to views. It includes both Django admin
and application-level routers provided by Django Rest Framework and each app.
"""
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView  # type: ignore

# API versioning. v1 is our initial version; future versions can be added here.

urlpatterns = [
    path('admin/', admin.site.urls),
    # Application URLs
    path('api/v1/users/', include('apps.users.urls')),
    path('api/v1/spas/', include('apps.spas.urls')),
    path('api/v1/bookings/', include('apps.bookings.urls')),
    path('api/v1/coupons/', include('apps.coupons.urls')),
    path('api/v1/finances/', include('apps.finances.urls')),
    path('api/v1/loyalty/', include('apps.loyalty.urls')),
    path('api/v1/reviews/', include('apps.reviews.urls')),
    # API schema and docs
    path('api/v1/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/v1/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
]
