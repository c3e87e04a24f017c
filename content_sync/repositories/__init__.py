"""Repositories — per-entity persistence behind explicit async methods.

Invariants:
    - Repositories never commit; the calling command or worker owns the transaction
    - Only operations the mutation and dispatch paths need are exposed

Design Decisions:
    - One class per entity, constructed with the request's AsyncSession
"""
