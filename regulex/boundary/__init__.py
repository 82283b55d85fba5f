"""
Boundary layer.

Adapters to external systems: database, vector index, model providers and
document storage.
"""
