"""
Business services. Each service is built per request from an AsyncSession and
the calling Principal, and enforces tier, scope and visibility rules before
delegating data access to franchise_api.repositories.
"""
