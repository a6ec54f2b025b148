"""Domain layer: form model, rules, and dependency analysis.

This layer depends only on stdlib, pydantic, and NetworkX.
It must never import from services, infrastructure, commands, or config.
"""
