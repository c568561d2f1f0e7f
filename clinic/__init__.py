"""Clinic application for the hospital management API.

Models, serializers, services and function views for patients, staff,
attendance, billing and insurance claims.
"""
