"""Core Business Logic Module

This module holds the user storage provider and the helpers around it,
independent of the Flask HTTP surface.

Module Structure:
    - storage/            : Provider, adapter, entity store, fallback storage
    - representation.py   : Adapter <-> JSON transformations
    - validators.py       : Input validation for user payloads

Usage Pattern:
    These modules are NOT auto-imported to avoid pulling Flask-side
    configuration into code that only needs the provider.

    Import explicitly when needed:
        from user_storage.core.storage import UserStorageProviderFactory
        from user_storage.core.representation import UserRepresentation
        from user_storage.core.validators import validate_username
"""
