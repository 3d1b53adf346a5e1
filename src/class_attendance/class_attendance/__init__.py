"""Class Attendance package.

This package is organized by feature modules (sessions, attendance, biometrics,
analytics, ...) with a thin Flask controller layer over service/repository layers.
"""
