"""
URL mappings for the records API.

Trailing slashes are deliberately omitted to match the admin UI and the
lookup URLs printed into QR codes.
"""
from django.urls import path, include

from .auth_views import login_view, register_view, me_view, jwt_refresh_view, jwt_logout_view
from .views import health
from .views.employees import employees, employee_detail, employee_qr


urlpatterns = [
    # Prometheus exposition at /metrics
    path('', include('django_prometheus.urls')),
    path('api/health', health.healthz, name='health'),
    # Authentication
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/register', register_view, name='register_view'),
    path('api/auth/me', me_view, name='me_view'),
    path('api/auth/refresh', jwt_refresh_view, name='jwt_refresh_view'),
    path('api/auth/logout', jwt_logout_view, name='jwt_logout_view'),
    # Employee records
    path('api/employees', employees, name='employees'),
    path('api/employees/<str:pk>', employee_detail, name='employee_detail'),
    path('api/employees/<str:pk>/qr', employee_qr, name='employee_qr'),
]
