"""Service layer — startup operations returning ServiceResult.

Services may import from the engine packages and config.
They must never import from commands or output.
"""
