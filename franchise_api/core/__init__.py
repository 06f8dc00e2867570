"""
Core application utilities.

This package provides:
- Application-level settings (separate from DB settings)
- Logging with correlation id and principal context
- Roles, tiers and the Principal used for access decisions
- Dependency helpers (current principal, tier guards, paging)
"""
