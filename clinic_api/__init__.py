"""
Clinic Records API

A FastAPI-based service for managing patients, doctors, medical records and
appointments, with token authentication, role/ownership access control and
slot-conflict-checked scheduling.
"""

__version__ = "1.0.0"
