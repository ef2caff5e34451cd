"""
Moteur de l'assistant de création d'annonces.
Brouillon, navigation entre étapes, persistance locale, géocodage,
images et soumission au catalogue.
"""

from .session import WizardSession, WizardSessionManager

__all__ = ["WizardSession", "WizardSessionManager"]
