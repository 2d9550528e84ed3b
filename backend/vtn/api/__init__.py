"""API Layer: FastAPI routes, identity dependency and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Routes never contain authorization logic (delegate to services)
"""
