"""Endpoints API"""
from app.api.v1.endpoints import wizard

__all__ = ["wizard"]
