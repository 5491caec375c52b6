"""Core application for the ophthalmology records backend.

Models, validators, services, serializers, views and route
registrations for patients, clinical records and staff authentication.
"""
