"""
Repository layer for data access.

Repositories encapsulate SQLAlchemy queries for each domain area. Access rules are
decided in franchise_api.services and passed in as SQL clauses.
"""
