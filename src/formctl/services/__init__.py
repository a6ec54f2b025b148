"""Service layer: the form store, generators, and checks.

Services may import from domain and infrastructure layers.
They must never import from commands or output.
"""
