"""
Franchise management API.

Run with:
    uvicorn franchise_api.api.main:app --reload
"""
