"""
Tests: fact sheet, project suggestions and the assistance helpers.

The LLM is simulated by monkeypatching the module-level ``llm_text_call``
and ``ai_available`` names the suggestion service imported.

Run with:
    pytest assessment_engine/tests/test_suggestions.py -v
"""

import pytest

from assessment_engine.services import assist_service, suggestion_service
from assessment_engine.services.pricing_service import calculate_pricing


ANSWERS = {
    "projectName": "Harbor Market",
    "projectType": "ecommerce",
    "projectDescription": "an online store for local fishmongers",
    "targetAudience": "home cooks",
    "mainGoals": ["Sell online", "Reduce phone orders"],
    "features": ["Shopping Cart", "Payment Processing"],
    "preferredTimeline": "asap",
    "budgetRange": "10k-25k",
}


class TestFactSheet:
    def test_fact_sheet_fields(self):
        breakdown = calculate_pricing(ANSWERS)
        facts = suggestion_service.build_fact_sheet(ANSWERS, breakdown)
        assert facts.project_name == "Harbor Market"
        assert facts.project_type == "ecommerce"
        assert facts.project_type_label == "E-commerce Store"
        assert facts.features == ["Payment Processing", "Shopping Cart", "Rush Timeline (ASAP)"]
        assert facts.main_goals == ["Sell online", "Reduce phone orders"]
        assert facts.pricing.subtotal == breakdown.subtotal


class TestGenerateSuggestions:
    def test_ai_suggestions_parsed(self, monkeypatch):
        monkeypatch.setattr(suggestion_service, "ai_available", lambda: True)
        monkeypatch.setattr(
            suggestion_service,
            "llm_text_call",
            lambda prompt, max_retries=0: "1. Add product reviews\n- Offer local pickup\n\n* Launch a newsletter",
        )
        suggestions = suggestion_service.generate_project_suggestions(ANSWERS)
        assert suggestions == ["Add product reviews", "Offer local pickup", "Launch a newsletter"]

    def test_prompt_contains_facts(self, monkeypatch):
        captured = {}

        def fake_llm(prompt, max_retries=0):
            captured["prompt"] = prompt
            return "Add product reviews"

        monkeypatch.setattr(suggestion_service, "ai_available", lambda: True)
        monkeypatch.setattr(suggestion_service, "llm_text_call", fake_llm)
        suggestion_service.generate_project_suggestions(ANSWERS)
        assert "Harbor Market" in captured["prompt"]
        assert "{facts}" not in captured["prompt"]

    def test_ai_failure_falls_back_to_template(self, monkeypatch):
        def failing_llm(prompt, max_retries=0):
            raise ConnectionError("Groq unreachable")

        monkeypatch.setattr(suggestion_service, "ai_available", lambda: True)
        monkeypatch.setattr(suggestion_service, "llm_text_call", failing_llm)
        suggestions = suggestion_service.generate_project_suggestions(ANSWERS)
        assert suggestions
        assert any(s.startswith("Estimated investment:") for s in suggestions)

    def test_empty_ai_reply_falls_back(self, monkeypatch):
        monkeypatch.setattr(suggestion_service, "ai_available", lambda: True)
        monkeypatch.setattr(suggestion_service, "llm_text_call", lambda prompt, max_retries=0: "   \n")
        assert suggestion_service.generate_project_suggestions(ANSWERS)

    def test_ai_disabled_uses_template(self, monkeypatch):
        def unexpected_llm(prompt, max_retries=0):
            raise AssertionError("LLM must not be called")

        monkeypatch.setattr(suggestion_service, "ai_available", lambda: False)
        monkeypatch.setattr(suggestion_service, "llm_text_call", unexpected_llm)
        suggestions = suggestion_service.generate_project_suggestions(ANSWERS)
        assert "Consider adding: Product catalog" in suggestions
        # already selected, so not suggested again
        assert "Consider adding: Shopping cart" not in suggestions
        assert "Selected features: Payment Processing, Shopping Cart, Rush Timeline (ASAP)" in suggestions
        assert "Timeline: Rush Timeline (ASAP) adjusts the estimate by +50%" in suggestions

    def test_template_never_empty_for_empty_answers(self, monkeypatch):
        monkeypatch.setattr(suggestion_service, "ai_available", lambda: False)
        suggestions = suggestion_service.generate_project_suggestions({})
        assert len(suggestions) >= 2
        assert len(suggestions) == len(set(suggestions))


class TestAssistHelpers:
    def test_suggest_features_filters_selected(self):
        suggestions = assist_service.suggest_features("ecommerce", ["Shopping cart", "wishlist"])
        assert "Shopping cart" not in suggestions
        assert "Wishlist" not in suggestions
        assert "Product catalog" in suggestions

    def test_suggest_features_unknown_type(self):
        assert assist_service.suggest_features("api") == []

    def test_generate_ideas_uses_context(self):
        ideas = assist_service.generate_ideas("a subscription product", "website")
        assert ideas[0] == "Implement a free trial period to attract users"
        assert len(ideas) == assist_service.MAX_IDEAS

    def test_generate_ideas_generic(self):
        assert assist_service.generate_ideas() == assist_service.GENERIC_IDEAS

    def test_clarifying_questions_capped(self):
        questions = assist_service.clarifying_questions({})
        assert len(questions) == 3
        assert questions[0].startswith("What type of project")

    def test_clarifying_questions_none_needed(self):
        answers = {
            "projectType": "website",
            "targetAudience": "runners",
            "mainGoals": ["Sell shoes"],
            "budgetRange": "5k-10k",
        }
        assert assist_service.clarifying_questions(answers) == []

    def test_improve_description(self):
        improved = assist_service.improve_description("a marketplace for vintage bikes")
        assert improved.startswith("A marketplace for vintage bikes.")
        assert "Consider adding more details" in improved

    def test_improve_long_description_untouched_beyond_punctuation(self):
        text = "a platform where local bakeries take preorders and schedule pickups"
        assert assist_service.improve_description(text) == (
            "A platform where local bakeries take preorders and schedule pickups."
        )

    def test_assist_dispatch(self):
        result = assist_service.assist("suggest-features", "web-app", {"mustHaveFeatures": ["Admin panel"]})
        assert "Admin panel" not in result["suggestions"]
        assert "User dashboard" in result["suggestions"]

    def test_assist_invalid_type(self):
        with pytest.raises(ValueError):
            assist_service.assist("write-my-code")


class TestLlmTextCall:
    class _Reply:
        def __init__(self, content):
            self.content = content
            self.response_metadata = {"finish_reason": "stop", "token_usage": {"total_tokens": 12}}

    def _fake_llm(self, replies):
        calls = []

        class _Llm:
            def invoke(inner, prompt):
                calls.append(prompt)
                return self._Reply(replies[len(calls) - 1])

        return _Llm(), calls

    def test_retries_empty_reply(self, monkeypatch):
        from assessment_engine.services import llm_service

        llm, calls = self._fake_llm(["", "Offer local pickup"])
        monkeypatch.setattr(llm_service, "get_llm", lambda: llm)
        assert llm_service.llm_text_call("prompt", max_retries=1) == "Offer local pickup"
        assert len(calls) == 2

    def test_empty_after_retries(self, monkeypatch):
        from assessment_engine.services import llm_service

        llm, calls = self._fake_llm(["  ", ""])
        monkeypatch.setattr(llm_service, "get_llm", lambda: llm)
        assert llm_service.llm_text_call("prompt", max_retries=1).strip() == ""
        assert len(calls) == 2

    def test_missing_key(self, monkeypatch):
        from assessment_engine.services import llm_service

        class _Settings:
            groq_api_key = ""
            ai_enabled = True

        monkeypatch.setattr(llm_service, "_llm_instance", None)
        monkeypatch.setattr(llm_service, "get_settings", lambda: _Settings())
        assert llm_service.ai_available() is False
        with pytest.raises(ValueError, match="GROQ_API_KEY"):
            llm_service.get_llm()
