"""
Django admin registrations for the core models.

Lets superusers inspect patients and clinical records via ``/admin/``
during development.
"""

from django.contrib import admin

from .models import ClinicalRecord, MedicalHistory, OphthalmicExam, Patient, User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'name', 'role', 'is_active')
    list_filter = ('role', 'is_active')
    search_fields = ('username', 'name')
    exclude = ('password',)


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('rut', 'first_names', 'last_names', 'birth_date', 'phone', 'email')
    search_fields = ('rut', 'first_names', 'last_names')


@admin.register(MedicalHistory)
class MedicalHistoryAdmin(admin.ModelAdmin):
    list_display = ('id', 'pregnancy', 'lactation', 'hypertension', 'diabetes')


@admin.register(OphthalmicExam)
class OphthalmicExamAdmin(admin.ModelAdmin):
    list_display = ('id', 'od_sphere', 'od_cylinder', 'od_axis', 'oi_sphere', 'oi_cylinder', 'oi_axis')


@admin.register(ClinicalRecord)
class ClinicalRecordAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'created_by', 'created_at')
    list_filter = ('created_at',)
    search_fields = ('patient__rut', 'patient__last_names')
