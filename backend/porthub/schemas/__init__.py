"""Pydantic Schemas — request/response validation for API endpoints.

Invariants:
    - Schemas validate at the system boundary (HTTP input, API responses)
    - Domain enums from core/ used for enum fields

Design Decisions:
    - Separate from models and core records: schemas are API contracts,
      models are persistence, records are what the engine passes around
"""
