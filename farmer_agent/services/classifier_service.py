"""
Classifier service mapping free text to an intent and matched entities.
Matching is plain lowercase substring containment: no tokenization,
stemming or word boundaries, so "rainbow" triggers the "rain" keyword.
"""

from farmer_agent.models.domain import EntityBag, Intent
from farmer_agent.services.lexicon import Lexicon, load_lexicon
from farmer_agent.utils.logger import get_logger

logger = get_logger(__name__)


class ClassifierService:
    """
    Stateless keyword classifier over a Lexicon.
    """

    def __init__(self, lexicon: Lexicon | None = None):
        """
        Initialize classifier.

        Args:
            lexicon: Keyword tables (defaults to config/lexicon.yaml)
        """
        self.lexicon = lexicon or load_lexicon()

    def classify(self, text: str) -> tuple[Intent, EntityBag]:
        """
        Classifies text and extracts entities.

        Args:
            text: Raw user input (may be empty)

        Returns:
            Tuple of (intent, entity bag)
        """
        normalized = text.lower()
        intent = self.match_intent(normalized)
        entities = self.extract_entities(normalized)

        logger.debug(
            "intent_classified",
            intent=intent.value,
            entity_categories=sorted(entities),
        )
        return intent, entities

    def match_intent(self, normalized: str) -> Intent:
        """
        First intent, in priority order, with any keyword inside the text.

        Args:
            normalized: Lowercased input

        Returns:
            Matching intent, or Intent.GENERAL
        """
        if not normalized.strip():
            return Intent.GENERAL

        for intent, keywords in self.lexicon.intent_keywords.items():
            if any(keyword in normalized for keyword in keywords):
                return intent
        return Intent.GENERAL

    def extract_entities(self, normalized: str) -> EntityBag:
        """
        Every vocabulary term found in the text, grouped by category.
        Categories without a match are omitted.

        Args:
            normalized: Lowercased input

        Returns:
            Entity bag
        """
        entities: EntityBag = {}
        if not normalized.strip():
            return entities

        for category, terms in self.lexicon.entity_vocabulary.items():
            found = [term for term in terms if term in normalized]
            if found:
                entities[category] = found
        return entities


def classify(text: str) -> tuple[Intent, EntityBag]:
    """Classifies text with the default lexicon."""
    return ClassifierService().classify(text)
