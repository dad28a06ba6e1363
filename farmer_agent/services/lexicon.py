"""
Keyword lexicon for intent classification and entity extraction.
Tables are loaded from config/lexicon.yaml and frozen into tuples.
"""

from functools import lru_cache
from types import MappingProxyType
from typing import Mapping

from farmer_agent.models.domain import ENTITY_CATEGORIES, INTENT_PRIORITY, Intent
from farmer_agent.utils.rules import load_table


class LexiconError(ValueError):
    """Raised when a lexicon table is incomplete."""


class Lexicon:
    """
    Immutable category -> ordered keyword triggers, for intents and entities.
    """

    def __init__(
        self,
        intents: Mapping[str, list[str]],
        entities: Mapping[str, list[str]],
    ):
        """
        Args:
            intents: Keywords per intent; must cover every prioritized intent
            entities: Vocabulary per entity category
        """
        missing = [i.value for i in INTENT_PRIORITY if i.value not in intents]
        if missing:
            raise LexiconError(f"Lexicon has no keywords for intents: {missing}")

        # Iteration order follows INTENT_PRIORITY, not the source mapping.
        self._intents = MappingProxyType(
            {
                intent: tuple(kw.lower() for kw in intents[intent.value])
                for intent in INTENT_PRIORITY
            }
        )
        self._entities = MappingProxyType(
            {
                category: tuple(term.lower() for term in entities.get(category, ()))
                for category in ENTITY_CATEGORIES
            }
        )

    @property
    def intent_keywords(self) -> Mapping[Intent, tuple[str, ...]]:
        """Intent triggers in classification priority order."""
        return self._intents

    @property
    def entity_vocabulary(self) -> Mapping[str, tuple[str, ...]]:
        """Entity terms per category, in lexicon order."""
        return self._entities

    @classmethod
    def from_table(cls, table: dict) -> "Lexicon":
        return cls(intents=table["intents"], entities=table.get("entities", {}))


@lru_cache(maxsize=1)
def load_lexicon() -> Lexicon:
    """Default lexicon built from config/lexicon.yaml."""
    return Lexicon.from_table(load_table("lexicon"))
