import pytest

from companion_agent.router import (
    ROUTING_RULES,
    AgentCategory,
    available_agents,
    detect_agent_intent,
    route_message,
)

ROUTING_ORDER = [
    AgentCategory.FINANCIAL,
    AgentCategory.WELLNESS,
    AgentCategory.PLANNER,
    AgentCategory.LEARNING,
    AgentCategory.RELATIONSHIP,
    AgentCategory.MEDIA,
    AgentCategory.NOTES,
]

# One keyword per category that appears in no other category's set.
SOLO_KEYWORDS = {
    AgentCategory.FINANCIAL: "crypto",
    AgentCategory.WELLNESS: "yoga",
    AgentCategory.PLANNER: "calendar",
    AgentCategory.LEARNING: "tutorial",
    AgentCategory.RELATIONSHIP: "colleague",
    AgentCategory.MEDIA: "podcast",
    AgentCategory.NOTES: "journal",
}


def test_rule_order_is_pinned():
    assert [category for _, category in ROUTING_RULES] == ROUTING_ORDER


def test_routes_by_keyword(sample_messages):
    for expected, message in sample_messages.items():
        assert detect_agent_intent(message) == AgentCategory(expected), message


@pytest.mark.parametrize("category,keyword", list(SOLO_KEYWORDS.items()))
def test_single_category_keyword(category, keyword):
    decision = route_message(f"Something about {keyword} for later")
    assert decision.category == category
    assert decision.matched_keyword == keyword


def test_earlier_category_wins_for_every_pair():
    for i, first in enumerate(ROUTING_ORDER):
        for second in ROUTING_ORDER[i + 1:]:
            message = f"{SOLO_KEYWORDS[second]} and {SOLO_KEYWORDS[first]}"
            assert detect_agent_intent(message) == first, message


def test_budget_and_gym_goes_to_financial():
    assert detect_agent_intent("my gym membership is wrecking my budget") == AgentCategory.FINANCIAL


def test_wellness_beats_planner():
    decision = route_message("feeling anxious about my workout plan")
    assert decision.category == AgentCategory.WELLNESS


def test_remind_is_claimed_by_planner():
    assert detect_agent_intent("remind me") == AgentCategory.PLANNER


@pytest.mark.parametrize("message", ["", "   ", None, "こんにちは", "¿qué tal?", "hmm ok", "planet bankrupt"])
def test_unrecognised_messages_go_to_default(message):
    decision = route_message(message)
    assert decision.category == AgentCategory.DEFAULT
    assert decision.matched_keyword is None
    assert decision.is_default


def test_matching_is_case_insensitive():
    assert detect_agent_intent("MY STOCK PORTFOLIO") == AgentCategory.FINANCIAL


def test_routing_is_stateless():
    first = detect_agent_intent("I love my family")
    detect_agent_intent("money money money")
    assert detect_agent_intent("I love my family") == first == AgentCategory.RELATIONSHIP


def test_available_agents_lists_all_categories():
    names = [name for name, _ in available_agents()]
    assert set(names) == set(AgentCategory)
    assert len(names) == 8
