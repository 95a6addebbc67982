"""
Tests: proposal assembly.

Run with:
    pytest assessment_engine/tests/test_proposal.py -v
"""

from datetime import date

import pytest

from assessment_engine.models.enums import ContentSource
from assessment_engine.rules.rules_config import PricingConfig
from assessment_engine.services import proposal_service


TODAY = date(2026, 3, 2)

ANSWERS = {
    "name": "Dana Reyes",
    "email": "dana@example.com",
    "projectName": "Crew Scheduler",
    "projectType": "web-app",
    "projectDescription": "shift scheduling for restaurant staff",
    "features": ["Shopping Cart", "Payment Processing"],
    "niceToHaveFeatures": ["Dark mode"],
    "platform": ["web"],
    "integrations": ["Slack"],
    "userAuthentication": "basic",
    "contentManagement": "basic-cms",
    "responsiveDesign": True,
    "budgetRange": "25k-50k",
}


@pytest.fixture(autouse=True)
def no_llm(monkeypatch):
    monkeypatch.setattr(proposal_service, "ai_available", lambda: False)


class TestFinalTotal:
    def test_rounds_to_nearest_hundred(self):
        assert proposal_service.final_total(26950, 100) == 27000
        assert proposal_service.final_total(26949, 100) == 26900

    def test_payment_schedule_absorbs_rounding(self):
        schedule = proposal_service.payment_schedule(27050, PricingConfig())
        assert [m.amount for m in schedule] == [8115, 8115, 8115, 2705]
        assert sum(m.amount for m in schedule) == 27050
        assert schedule[0].milestone == "Project Kickoff"


class TestGenerateProposal:
    def test_structure(self):
        proposal = proposal_service.generate_proposal(ANSWERS, assessment_id=7, today=TODAY)
        assert proposal.assessment_id == 7
        assert proposal.title == "Professional Proposal: Crew Scheduler"
        assert proposal.client_name == "Dana Reyes"
        assert proposal.proposal_date == TODAY
        assert proposal.pricing.breakdown.subtotal == 30800
        assert proposal.pricing.final_total == 30800
        assert sum(m.amount for m in proposal.pricing.payment_schedule) == 30800
        assert proposal.generated_by is ContentSource.TEMPLATE
        assert proposal.special_notes is None

    def test_timeline(self):
        timeline = proposal_service.generate_proposal(ANSWERS, 1, today=TODAY).timeline
        assert timeline.total_weeks == 14
        assert [p.weeks for p in timeline.phases] == [3, 9, 3, 2]
        assert timeline.total_duration == "14 weeks (approximately 4 months)"
        assert timeline.start_date == date(2026, 3, 9)
        assert all(len(p.deliverables) == 4 for p in timeline.phases)

    def test_rush_timeline_shortens_schedule(self):
        timeline = proposal_service.generate_proposal(
            {**ANSWERS, "preferredTimeline": "asap"}, 1, today=TODAY
        ).timeline
        assert timeline.total_weeks == 11

    @pytest.mark.parametrize("storage, weeks", [
        (None, 4),
        ("simple", 4),
        ("complex", 6),
        ("enterprise", 10),
    ])
    def test_data_storage_scales_timeline(self, storage, weeks):
        answers = {"projectType": "website"}
        if storage:
            answers["dataStorage"] = storage
        timeline = proposal_service.generate_proposal(answers, 1, today=TODAY).timeline
        assert timeline.total_weeks == weeks

    def test_data_complexity_factor(self):
        from assessment_engine.services.pricing_service import calculate_pricing

        assert proposal_service.data_complexity(calculate_pricing({"dataStorage": "enterprise"})) == 2.5
        assert proposal_service.data_complexity(calculate_pricing({})) == 1.0

    def test_scope_of_work(self):
        scope = proposal_service.generate_proposal(ANSWERS, 1, today=TODAY).scope_of_work
        assert scope.features == ["Shopping Cart", "Payment Processing"]
        assert scope.nice_to_have_features == ["Dark mode"]
        assert scope.integrations == ["Slack"]
        assert "Authentication: basic" in scope.technical_requirements
        assert "Responsive Design (Mobile, Tablet, Desktop)" in scope.technical_requirements

    def test_deliverables(self):
        deliverables = proposal_service.generate_proposal(ANSWERS, 1, today=TODAY).deliverables
        assert "Content management system setup" in deliverables
        assert deliverables[-1] == "Post-launch support (30 days)"

    def test_low_budget_notes(self):
        proposal = proposal_service.generate_proposal(
            {**ANSWERS, "budgetRange": "under-5k"}, 1, today=TODAY
        )
        assert proposal.special_notes is not None
        assert "Phased Development Approach" in proposal.special_notes
        assert proposal.next_steps[0] == "Consider the realistic scope options provided for your budget"
        assert proposal.next_steps[-1] == "Discuss phased approach if needed to fit budget constraints"

    def test_template_narrative(self):
        narrative = proposal_service.generate_proposal(ANSWERS, 1, today=TODAY).narrative
        assert narrative.startswith("We propose to build Crew Scheduler")
        assert "$30,800" in narrative

    def test_ai_narrative(self, monkeypatch):
        monkeypatch.setattr(proposal_service, "ai_available", lambda: True)
        monkeypatch.setattr(
            proposal_service, "llm_text_call",
            lambda prompt, max_retries=0: "Crew Scheduler will give managers their evenings back.",
        )
        proposal = proposal_service.generate_proposal(ANSWERS, 1, today=TODAY)
        assert proposal.generated_by is ContentSource.AI
        assert proposal.narrative == "Crew Scheduler will give managers their evenings back."

    def test_ai_failure_keeps_proposal(self, monkeypatch):
        def failing_llm(prompt, max_retries=0):
            raise ValueError("GROQ_API_KEY is not set")

        monkeypatch.setattr(proposal_service, "ai_available", lambda: True)
        monkeypatch.setattr(proposal_service, "llm_text_call", failing_llm)
        proposal = proposal_service.generate_proposal(ANSWERS, 1, today=TODAY)
        assert proposal.generated_by is ContentSource.TEMPLATE
        assert proposal.narrative

    def test_camel_case_json(self):
        payload = proposal_service.generate_proposal(ANSWERS, 1, today=TODAY).model_dump(
            mode="json", by_alias=True
        )
        assert payload["proposalDate"] == "2026-03-02"
        assert payload["pricing"]["finalTotal"] == 30800
        assert payload["timeline"]["startDate"] == "2026-03-09"
