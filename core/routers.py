"""
URL mappings for the ophthalmology records API.

Trailing slashes are omitted to match the front-end client.
"""
from django.urls import include, path

from .auth_views import login_view, logout_view, me_view
from .views import health
from .views.clinical_records import clinical_record_detail, patient_clinical_records
from .views.patients import patient_detail, patients
from .views.users import users

urlpatterns = [
    path('metrics', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),
    # Authentication
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/logout', logout_view, name='logout_view'),
    path('api/auth/me', me_view, name='me_view'),
    # Staff accounts
    path('api/users', users, name='users'),
    # Patients
    path('api/patients', patients, name='patients'),
    path('api/patients/<int:pk>', patient_detail, name='patient_detail'),
    path('api/patients/<int:patient_id>/clinical-records', patient_clinical_records, name='patient_clinical_records'),
    # Clinical records
    path('api/clinical-records/<int:pk>', clinical_record_detail, name='clinical_record_detail'),
]
