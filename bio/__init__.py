"""Core application of the MediBio backend.

This package contains the models, field encryption, the bio page access
gate, serializers, views and route registrations of the API.
"""
