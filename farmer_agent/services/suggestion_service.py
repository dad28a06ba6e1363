"""
Follow-up prompt suggestions keyed by intent.
"""

from typing import Mapping

from farmer_agent.models.domain import Intent
from farmer_agent.utils.rules import frozen_table


def _suggestion_table() -> Mapping[str, tuple[str, ...]]:
    return frozen_table("responses")["suggestions"]


def suggestions_for(intent: Intent | str) -> list[str]:
    """
    Static follow-up prompts for an intent.
    Intents without their own table (advice, general, unknown) get the general one.

    Args:
        intent: Intent enum or its string value

    Returns:
        Fresh list of 3-5 prompts
    """
    key = intent.value if isinstance(intent, Intent) else str(intent)
    table = _suggestion_table()
    return list(table.get(key, table[Intent.GENERAL.value]))
