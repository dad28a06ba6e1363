"""
Unit tests for the HTTP request schemas.
"""

import pytest
from pydantic import ValidationError

from farmer_agent.models.schemas import ChatRequest, DiagnosisRequest


class TestChatRequest:
    """Tests for chat request parsing."""

    def test_camel_case_history(self):
        """Should read conversationHistory as sent by browsers."""
        # Act
        request = ChatRequest.model_validate(
            {
                "message": "Is compost good?",
                "conversationHistory": [
                    {"speaker": "user", "text": "Hello"},
                    {"speaker": "assistant", "text": "Hello! How can I help?"},
                ],
            }
        )

        # Assert
        assert [turn.speaker for turn in request.conversation_history] == ["user", "assistant"]

    def test_snake_case_history(self):
        """Should keep accepting the field name."""
        # Act
        request = ChatRequest.model_validate(
            {"message": "hi", "conversation_history": [{"speaker": "user", "text": "Hello"}]}
        )

        # Assert
        assert len(request.conversation_history) == 1

    def test_camel_case_history_is_validated(self):
        """Should reject malformed turns instead of dropping the key."""
        # Act & Assert
        with pytest.raises(ValidationError):
            ChatRequest.model_validate(
                {"message": "hi", "conversationHistory": [{"speaker": "bot", "text": "x"}]}
            )


class TestDiagnosisRequest:
    """Tests for diagnosis request parsing."""

    @pytest.mark.parametrize("analysis", ["garbage", ["Tomato"], 7, {"cropType": "Tomato"}])
    def test_any_external_analysis_accepted(self, analysis):
        """Should leave analysis validation to the diagnosis service."""
        # Act
        request = DiagnosisRequest.model_validate(
            {"crop": "Wheat", "externalAnalysis": analysis}
        )

        # Assert
        assert request.external_analysis == analysis
