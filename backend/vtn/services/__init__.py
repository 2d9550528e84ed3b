"""Services Layer: per-entity-kind orchestration of scope, filter, validation and storage.

Invariants:
    - One service module per entity kind
    - Services receive a Principal and a repository; they never read request state
"""
