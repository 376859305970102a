"""Merzah Events Package - recurring mosque event scheduling and rotation.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
