"""Services Layer — imperative shell around the pure core.

Invariants:
    - Services await the store and channels; every rule comes from core/
    - Public service operations return Outcome (core/outcome.py), never raise PortHubError

Design Decisions:
    - Collaborators injected through constructors: tests swap in fakes with
      controllable timing, production wires SQL/httpx adapters in main.lifespan
"""
