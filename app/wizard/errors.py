"""
Erreurs de l'assistant de création d'annonces.
"""
from typing import List, Optional


class WizardError(Exception):
    """Erreur de base de l'assistant"""


class StepIncompleteError(WizardError):
    """Champs obligatoires manquants: bloque la navigation et la publication."""

    def __init__(self, step: str, missing_fields: List[str]):
        self.step = step
        self.missing_fields = list(missing_fields)
        super().__init__(f"Étape {step} incomplète: {', '.join(self.missing_fields)}")


class UnknownFieldError(WizardError):
    """Mise à jour d'un champ qui n'existe pas dans le brouillon"""

    def __init__(self, fields: List[str]):
        self.fields = sorted(fields)
        super().__init__(f"Champ(s) inconnu(s): {', '.join(self.fields)}")


class PersistenceError(WizardError):
    """Échec de lecture/écriture du brouillon local"""


class GeocodingError(WizardError):
    """Échec du fournisseur de géocodage (réseau, HTTP, réponse illisible)"""

    def __init__(self, message: str, details: Optional[str] = None):
        self.details = details
        super().__init__(message)


class UploadError(WizardError):
    """Erreur remontée par le widget d'upload"""

    def __init__(self, message: str, details: Optional[str] = None):
        self.details = details
        super().__init__(message)


class ImageLimitError(UploadError):
    """Nombre maximum d'images atteint"""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Limite de {limit} images atteinte")


class FeatureError(WizardError):
    """Caractéristique personnalisée refusée (vide, doublon, limite)"""


class SubmissionError(WizardError):
    """Le catalogue a refusé l'enregistrement ou la publication"""
