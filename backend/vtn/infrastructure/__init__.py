"""Infrastructure Layer: storage backends, database sessions, logging setup.

Invariants:
    - Storage backends implement the protocols in core/repository_protocols.py
    - SQLAlchemy exceptions never escape this layer unmapped
"""
