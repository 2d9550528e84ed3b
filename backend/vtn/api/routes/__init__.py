"""Route Modules: one file per entity kind.

Invariants:
    - Each module defines its own APIRouter with prefix and tags
"""
