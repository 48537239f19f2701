# backend/app/__init__.py
"""
Candidature mail relay backend application package.

This package contains:
- main: FastAPI application entrypoint
- notifications: candidature / interview / decision / contact-form notifications
- mail: email delivery transports (Brevo HTTP API, SMTP, logging)
- api: debug endpoints
"""
