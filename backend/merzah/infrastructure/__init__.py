"""Infrastructure Layer - database, scheduling and cross-cutting concerns.

Invariants:
    - Storage failures are mapped to core.errors.DatabaseError before leaving this layer
    - Implements the Protocols in core/repository_protocols.py
"""
