"""Biometric Attendance kiosk package.

This package is organized by feature modules (webauthn, credentials, face, ...)
with a thin Flask controller layer over service/repository layers. The
repositories talk to the remote attendance REST API.
"""
