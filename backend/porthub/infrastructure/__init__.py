"""Infrastructure Layer — database, outbound HTTP adapters, and cross-cutting concerns.

Invariants:
    - Infrastructure implements core/repository_protocols; it never decides business rules
    - All external calls bounded by timeouts, failures mapped or absorbed per contract

Design Decisions:
    - Thin adapters over raw clients (SQLAlchemy, httpx): the engine only sees Protocols
"""
