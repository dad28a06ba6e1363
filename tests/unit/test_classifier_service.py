"""
Unit tests for ClassifierService and the Lexicon tables.
Tests intent priority, entity extraction and substring semantics.
"""

import pytest

from farmer_agent.models.domain import INTENT_PRIORITY, Intent
from farmer_agent.services.classifier_service import ClassifierService, classify
from farmer_agent.services.lexicon import Lexicon, LexiconError, load_lexicon


class TestIntentClassification:
    """Tests for intent matching and priority order."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Will it rain tomorrow?", Intent.WEATHER),
            ("what pests are attacking my crop", Intent.PEST),
            ("Is compost good?", Intent.SOIL),
            ("When should I harvest?", Intent.CROP),
            ("Should I install a sprinkler?", Intent.IRRIGATION),
            ("Where can I sell my onion", Intent.MARKET),
            ("Can you help me?", Intent.ADVICE),
            ("hello there", Intent.GENERAL),
        ],
    )
    def test_single_category_keyword(self, classifier, text, expected):
        """Should return the intent whose keyword appears in the text."""
        # Act
        intent, _ = classifier.classify(text)

        # Assert
        assert intent == expected

    def test_higher_priority_intent_wins(self, classifier):
        """Should prefer pest over advice when both keywords appear."""
        # Act
        intent, _ = classifier.classify("help, there are pests everywhere")

        # Assert
        assert intent == Intent.PEST

    def test_soil_beats_irrigation(self, classifier):
        """Should resolve soil/irrigation overlap by priority."""
        # Act
        intent, _ = classifier.classify("water and fertilizer schedule")

        # Assert
        assert intent == Intent.SOIL

    def test_matching_is_case_insensitive(self, classifier):
        """Should lowercase input before matching."""
        # Act
        intent, entities = classifier.classify("TOMATO PESTS")

        # Assert
        assert intent == Intent.PEST
        assert entities == {"crops": ["tomato"]}

    def test_substring_match_without_word_boundaries(self, classifier):
        """Should match keywords inside longer words ("rainbow" has "rain")."""
        # Act
        intent, _ = classifier.classify("a rainbow appeared")

        # Assert
        assert intent == Intent.WEATHER


class TestEmptyInput:
    """Tests for empty and whitespace-only messages."""

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_blank_input_is_general_without_entities(self, classifier, text):
        """Should return general intent and an empty entity bag."""
        # Act
        intent, entities = classifier.classify(text)

        # Assert
        assert intent == Intent.GENERAL
        assert entities == {}

    def test_module_level_classify(self):
        """Should classify with the default lexicon."""
        # Act
        intent, entities = classify("")

        # Assert
        assert intent == Intent.GENERAL
        assert entities == {}


class TestEntityExtraction:
    """Tests for entity extraction."""

    def test_entities_independent_of_intent(self, classifier):
        """Should extract the crop even though weather wins the intent."""
        # Act
        intent, entities = classifier.classify("How do I grow tomato in rainy weather")

        # Assert
        assert intent == Intent.WEATHER
        assert entities["crops"] == ["tomato"]

    def test_all_categories_extracted(self, classifier):
        """Should group terms by category and omit nothing that matched."""
        # Act
        _, entities = classifier.classify("yellow spots on my wheat field this week")

        # Assert
        assert entities == {
            "crops": ["wheat"],
            "locations": ["field"],
            "timeframes": ["week"],
            "problems": ["yellow", "spots"],
        }

    def test_categories_without_match_are_omitted(self, classifier):
        """Should not include empty categories."""
        # Act
        _, entities = classifier.classify("sell my onion")

        # Assert
        assert entities == {"crops": ["onion"]}

    def test_terms_follow_lexicon_order(self, classifier):
        """Should list terms in lexicon order, including substring hits."""
        # Act
        intent, entities = classifier.classify("onion price")

        # Assert
        assert intent == Intent.MARKET
        # "price" contains "rice", which precedes "onion" in the lexicon
        assert entities["crops"] == ["rice", "onion"]


class TestLexicon:
    """Tests for lexicon table validation."""

    def test_default_lexicon_covers_priority_order(self):
        """Should iterate intents in priority order."""
        # Act
        lexicon = load_lexicon()

        # Assert
        assert tuple(lexicon.intent_keywords) == INTENT_PRIORITY

    def test_missing_intent_raises(self):
        """Should reject a table without keywords for every intent."""
        # Arrange
        intents = {"weather": ["rain"]}

        # Act & Assert
        with pytest.raises(LexiconError, match="pest"):
            Lexicon(intents=intents, entities={})

    def test_order_follows_priority_not_source(self):
        """Should classify by priority even if the table lists intents differently."""
        # Arrange
        intents = {intent.value: [intent.value] for intent in reversed(INTENT_PRIORITY)}
        intents["advice"] = ["weather"]
        lexicon = Lexicon(intents=intents, entities={"crops": ["Millet"]})
        classifier = ClassifierService(lexicon)

        # Act
        intent, entities = classifier.classify("weather for millet")

        # Assert
        assert intent == Intent.WEATHER
        assert entities == {"crops": ["millet"]}

    def test_tables_are_read_only(self):
        """Should expose immutable tables."""
        # Arrange
        lexicon = load_lexicon()

        # Act & Assert
        with pytest.raises(TypeError):
            lexicon.intent_keywords[Intent.WEATHER] = ("snow",)
        assert isinstance(lexicon.entity_vocabulary["crops"], tuple)
