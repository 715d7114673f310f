"""
Core application utilities for settings and FastAPI dependencies.

This package provides:
- Application-level settings (separate from DB settings)
- Dependency helpers (DB session, current user, role checks, payment gateways)
- Security helpers (password hashing, JWT) and domain exceptions
"""
