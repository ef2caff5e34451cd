# app/crud/__init__.py
"""
Couche catalogue de l'assistant

Modules CRUD:
- Property: Annonces immobilières (création / mise à jour)
"""

from .property import PropertyCRUD, get_property_crud, draft_to_catalog_payload

__all__ = [
    "PropertyCRUD",
    "get_property_crud",
    "draft_to_catalog_payload",
]
