"""Infrastructure layer: history stacks, clipboard, and blob storage.

This layer may read domain models but never imports from services,
commands, or output.
"""
