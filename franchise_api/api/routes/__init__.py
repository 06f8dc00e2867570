"""
API route modules.

This package contains subrouters for:
- Auth: login, register, refresh, logout, current user and navigation
- Users, accounts (HQ/MF/TT) and learning centers
- Programs and subprograms
- Students, teachers and learning groups
- Training types and trainings
- Products, inventory, orders and reports (students, inventory, royalties)

Routers are included from franchise_api.api.main (under the /api/v1 prefix).
"""
