"""
Database models for the ophthalmology records backend.

A clinical record ties one patient to one medical history snapshot and
one ophthalmic exam, and remembers which staff member created it.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models

from .validators import calculate_age


class Role(models.TextChoices):
    """The two staff roles. Used for authorization only."""
    ADMIN = "ADMIN", "Administrador"
    USER = "USER", "Usuario"


class User(AbstractUser):
    """Staff account with a role and a display name."""
    role = models.CharField(max_length=10, choices=Role.choices, default=Role.USER)
    name = models.CharField(max_length=255, blank=True)

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class Patient(models.Model):
    # 12345678-5, stored without dots so the unique constraint holds
    rut = models.CharField(max_length=12, unique=True)
    first_names = models.CharField(max_length=255)
    last_names = models.CharField(max_length=255, db_index=True)
    birth_date = models.DateField()
    phone = models.CharField(max_length=32)
    email = models.EmailField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    @property
    def age(self) -> int:
        return calculate_age(self.birth_date)

    @property
    def full_name(self) -> str:
        return f"{self.first_names} {self.last_names}".strip()

    def __str__(self) -> str:
        return f"{self.full_name} ({self.rut})"


class MedicalHistory(models.Model):
    """Conditions relevant to an ophthalmic prescription."""
    pregnancy = models.BooleanField(default=False)
    lactation = models.BooleanField(default=False)
    hypertension = models.BooleanField(default=False)
    diabetes = models.BooleanField(default=False)
    other = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "medical histories"


class OphthalmicExam(models.Model):
    """Refraction per eye: OD (right) and OI (left). Every value is optional."""
    od_sphere = models.FloatField(null=True, blank=True)
    od_cylinder = models.FloatField(null=True, blank=True)
    od_axis = models.PositiveSmallIntegerField(null=True, blank=True)
    od_pd = models.FloatField(null=True, blank=True)
    oi_sphere = models.FloatField(null=True, blank=True)
    oi_cylinder = models.FloatField(null=True, blank=True)
    oi_axis = models.PositiveSmallIntegerField(null=True, blank=True)
    oi_pd = models.FloatField(null=True, blank=True)
    comments = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)


class ClinicalRecord(models.Model):
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name="clinical_records")
    medical_history = models.OneToOneField(MedicalHistory, on_delete=models.CASCADE, related_name="record")
    ophthalmic_exam = models.OneToOneField(OphthalmicExam, on_delete=models.CASCADE, related_name="record")
    created_by = models.ForeignKey(
        User, null=True, on_delete=models.SET_NULL, related_name="clinical_records"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return f"Record {self.pk} for {self.patient}"
