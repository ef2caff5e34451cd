"""
Suggestions de titre et de description par IA (Hugging Face Mistral-7B).
"""
from typing import Optional, Tuple
import asyncio
import logging
import re

import requests

from app.core.config import settings
from app.models import PropertyDraft, SummarySuggestion
from app.wizard.prompts import SUMMARY_PROMPT, SYSTEM_PROMPT
from app.wizard.state import DraftStore

logger = logging.getLogger(__name__)

_TITLE_RE = re.compile(r"Title:(.*?)(?=Description:|$)", re.IGNORECASE | re.DOTALL)
_DESCRIPTION_RE = re.compile(r"Description:(.*)$", re.IGNORECASE | re.DOTALL)


def can_generate_summary(draft: PropertyDraft) -> bool:
    """Assez d'informations pour solliciter l'IA ?"""
    return bool(
        draft.property_type
        and draft.bedrooms is not None
        and draft.bathrooms is not None
        and draft.square_feet is not None
        and draft.city.strip()
        and draft.country.strip()
    )


def build_summary_prompt(draft: PropertyDraft) -> str:
    location = f"{draft.city}, {draft.country}"
    if draft.show_exact_address and draft.address:
        location += f" ({draft.address})"

    features = list(draft.features) + [f.label for f in draft.custom_features]

    return SUMMARY_PROMPT.format(
        property_type=draft.property_type.value if draft.property_type else "Not specified",
        location=location,
        price=f"${draft.price:,.0f}" if draft.price else "Not specified",
        bedrooms=draft.bedrooms,
        bathrooms=draft.bathrooms,
        square_feet=draft.square_feet,
        features=", ".join(features) or "None specified",
        year_built=f"- Year Built: {draft.year_built}\n" if draft.year_built else "",
        title=draft.title or "No title yet",
        description=draft.description or "No description yet",
    )


def parse_summary(content: str) -> Tuple[str, str]:
    """
    Extrait titre et description de la réponse.

    Sans sections "Title:"/"Description:", la première ligne sert de
    titre et le reste de description.
    """
    content = (content or "").strip()
    title_match = _TITLE_RE.search(content)
    description_match = _DESCRIPTION_RE.search(content)

    if title_match or description_match:
        title = title_match.group(1).strip() if title_match else ""
        description = description_match.group(1).strip() if description_match else ""
    else:
        first, _, rest = content.partition("\n")
        title, description = first.strip(), rest.strip()

    return title.strip('"').strip()[:100], description


class AISummaryGenerator:
    """Génère des suggestions via l'API Hugging Face Inference."""

    def __init__(self, api_token: Optional[str] = None, model: Optional[str] = None):
        self.api_token = api_token if api_token is not None else settings.HUGGINGFACE_API_TOKEN
        self.model = model or settings.LLM_MODEL
        self.api_url = f"https://api-inference.huggingface.co/models/{self.model}"
        self.headers = {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json"
        }

    async def generate(self, draft: PropertyDraft) -> SummarySuggestion:
        if not can_generate_summary(draft):
            return SummarySuggestion(error="Missing information: type, rooms, size, city and country are required")
        if not self.api_token:
            return SummarySuggestion(error="HUGGINGFACE_API_TOKEN manquant")

        prompt = f"<s>[INST] {SYSTEM_PROMPT}\n\n{build_summary_prompt(draft)} [/INST]"
        content, error = await asyncio.to_thread(self._call_huggingface, prompt)
        if error:
            return SummarySuggestion(error=error)

        title, description = parse_summary(content)
        if not title and not description:
            return SummarySuggestion(error="Empty AI response")
        return SummarySuggestion(title=title, description=description)

    def _call_huggingface(self, prompt: str) -> Tuple[str, Optional[str]]:
        """Appelle l'API Hugging Face Inference."""
        payload = {
            "inputs": prompt,
            "parameters": {
                "max_new_tokens": settings.LLM_MAX_TOKENS,
                "temperature": settings.LLM_TEMPERATURE,
                "top_p": 0.95,
                "do_sample": True,
                "return_full_text": False
            }
        }

        try:
            logger.info("📡 Appel Hugging Face API...")
            response = requests.post(self.api_url, headers=self.headers, json=payload, timeout=60)

            if response.status_code == 503:
                logger.warning("⏳ Modèle en cours de chargement...")
                return "", "AI model is loading, please retry in a few seconds"

            if response.status_code == 200:
                result = response.json()
                first = result[0] if isinstance(result, list) and result else None
                text = first.get("generated_text") if isinstance(first, dict) else None
                if isinstance(text, str):
                    text = text.strip()
                    logger.info(f"✅ Suggestion générée ({len(text)} chars)")
                    return text, None
                logger.error(f"❌ Réponse inattendue: {str(result)[:200]}")

            logger.error(f"❌ Erreur API {response.status_code}")
            return "", f"AI service error ({response.status_code})"

        except (requests.RequestException, ValueError) as e:
            logger.error(f"❌ Exception HF: {e}")
            return "", "AI service unavailable"


def apply_suggestion(
    store: DraftStore,
    suggestion: SummarySuggestion,
    use_title: bool = True,
    use_description: bool = True
) -> None:
    """Reporte la suggestion dans le brouillon."""
    updates = {}
    if use_title and suggestion.title:
        updates["title"] = suggestion.title
    if use_description and suggestion.description:
        updates["description"] = suggestion.description
    if updates:
        store.update_property_data(updates)
