"""VTN Application Package: authorization-scoped Program/Event/Report/VEN service.

Invariants:
    - Package root contains no executable code (no import side-effects)
"""
