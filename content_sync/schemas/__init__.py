"""Pydantic Schemas — request/response validation for API endpoints and job payloads.

Invariants:
    - Schemas validate at system boundaries (HTTP requests, broker messages)
    - Domain types from core/ used for enum fields

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
