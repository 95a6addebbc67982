"""
Tests: pricing aggregator.

Run with:
    pytest assessment_engine/tests/test_pricing.py -v
"""

import pytest

from assessment_engine.models.enums import LineItemKind
from assessment_engine.rules.feature_registry import default_registry
from assessment_engine.rules.modifier_rules import round_currency
from assessment_engine.rules.rules_config import PricingConfig
from assessment_engine.services.pricing_service import PricingService, calculate_pricing


FULL_ANSWERS = {
    "projectType": "saas",
    "mustHaveFeatures": ["Analytics Dashboard", "Team collaboration", "Search"],
    "userAuthentication": "enterprise-sso",
    "paymentProcessing": True,
    "realTimeFeatures": True,
    "contentManagement": "headless-cms",
    "apiRequirements": "public",
    "integrations": ["Stripe", "Slack"],
    "platform": ["web", "ios"],
    "designStyle": "custom",
    "dataStorage": "complex",
    "accessibilityRequirements": "wcag-aa",
    "expectedUsers": "10000+",
    "preferredTimeline": "1-3-months",
}


class TestScenarios:
    def test_web_app_with_cart_and_payments(self):
        breakdown = calculate_pricing({
            "projectType": "web-app",
            "features": ["Shopping Cart", "Payment Processing"],
        })
        assert breakdown.project_type == "web-app"
        assert breakdown.base_price == 21000
        assert breakdown.features == ["payment-processing", "shopping-cart"]
        assert breakdown.total_multiplier == 1
        assert breakdown.subtotal == round_currency((21000 + 1500 + 2000) * 1.1)

        by_feature = {item.feature_id: item for item in breakdown.line_items if item.feature_id}
        assert by_feature["shopping-cart"].amount == 1500
        assert by_feature["payment-processing"].amount == 2000
        assert breakdown.line_items[0].kind is LineItemKind.BASE
        assert breakdown.line_items[0].amount == 21000

    def test_unknown_project_type_uses_default_tier(self):
        breakdown = calculate_pricing({"projectType": "quantum-widget"})
        assert breakdown.project_type == "default"
        assert breakdown.base_price == 6000
        assert breakdown.subtotal == 6000

    def test_empty_answers(self):
        breakdown = calculate_pricing({})
        assert breakdown.subtotal == 6000
        assert len(breakdown.line_items) == 1
        assert breakdown.line_items[0].kind is LineItemKind.BASE
        assert breakdown.features == []
        assert breakdown.estimated_range.average == 6000

    def test_none_answers(self):
        assert calculate_pricing(None).subtotal == 6000


class TestProperties:
    def test_deterministic(self):
        first = calculate_pricing(FULL_ANSWERS)
        second = calculate_pricing(dict(FULL_ANSWERS))
        assert first.model_dump() == second.model_dump()

    def test_range_ordering(self):
        for answers in ({}, FULL_ANSWERS, {"projectType": "website", "preferredTimeline": "flexible"}):
            estimated = calculate_pricing(answers).estimated_range
            assert estimated.low <= estimated.average <= estimated.high

    def test_range_factors(self):
        breakdown = calculate_pricing(FULL_ANSWERS)
        assert breakdown.estimated_range.average == breakdown.subtotal
        assert breakdown.estimated_range.low == round_currency(breakdown.subtotal * 0.85)
        assert breakdown.estimated_range.high == round_currency(breakdown.subtotal * 1.25)

    def test_line_items_reconcile_with_subtotal(self):
        for answers in ({}, FULL_ANSWERS, {"projectType": "mobile-app", "dataStorage": "simple"}):
            breakdown = calculate_pricing(answers)
            total = sum(item.amount for item in breakdown.line_items)
            assert abs(total - breakdown.subtotal) <= 1

    @pytest.mark.parametrize("label", [
        definition.label for definition in default_registry if definition.selectable
    ])
    def test_adding_a_feature_never_lowers_subtotal(self, label):
        answers = {
            "projectType": "website",
            "features": ["Admin Panel"],
            "dataStorage": "simple",
            "preferredTimeline": "flexible",
        }
        before = calculate_pricing(answers).subtotal
        after = calculate_pricing({**answers, "features": ["Admin Panel", label]}).subtotal
        assert after >= before

    def test_duplicate_labels_priced_once(self):
        once = calculate_pricing({"features": ["Shopping Cart"]})
        twice = calculate_pricing({"features": ["Shopping Cart", "shopping cart", "cart"]})
        assert once.subtotal == twice.subtotal


class TestLineItems:
    def test_multiplicative_items_follow_additive_items(self):
        breakdown = calculate_pricing(FULL_ANSWERS)
        kinds = [item.kind for item in breakdown.line_items]
        assert kinds[0] is LineItemKind.BASE
        assert kinds[-1] is LineItemKind.COMPLEXITY
        last_additive = max(i for i, k in enumerate(kinds) if k is LineItemKind.ADDITIVE)
        first_multiplicative = min(i for i, k in enumerate(kinds) if k is LineItemKind.MULTIPLICATIVE)
        assert last_additive < first_multiplicative

    def test_discount_item_is_negative(self):
        breakdown = calculate_pricing({"preferredTimeline": "flexible"})
        discount = breakdown.line_items[-1]
        assert discount.feature_id == "timeline-flexible"
        assert discount.amount == -600
        assert breakdown.subtotal == 5400

    def test_per_integration_item(self):
        breakdown = calculate_pricing({"integrations": ["Stripe", "Slack", "HubSpot"]})
        item = next(i for i in breakdown.line_items if i.feature_id == "third-party-integrations")
        assert item.amount == 3000
        assert item.label.endswith("(3)")

    def test_no_complexity_item_for_unit_multiplier(self):
        breakdown = calculate_pricing({"projectType": "website", "features": ["Admin Panel"]})
        assert all(item.kind is not LineItemKind.COMPLEXITY for item in breakdown.line_items)


class TestConfig:
    def test_custom_range_factors(self):
        service = PricingService(config=PricingConfig(range_low_factor=0.5, range_high_factor=2.0))
        breakdown = service.calculate_pricing({})
        assert breakdown.estimated_range.low == 3000
        assert breakdown.estimated_range.high == 12000

    def test_camel_case_json_shape(self):
        payload = calculate_pricing({"projectType": "website"}).model_dump(mode="json", by_alias=True)
        assert {"subtotal", "estimatedRange", "lineItems", "basePrice", "totalMultiplier"} <= set(payload)
        assert payload["lineItems"][0]["kind"] == "base"


class TestNonFiniteCounts:
    @pytest.mark.parametrize("count", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_integration_count_treated_as_absent(self, count):
        breakdown = calculate_pricing({"features": ["Integrations"], "integrations": count})
        assert breakdown.subtotal == calculate_pricing({"features": ["Integrations"]}).subtotal
        item = next(i for i in breakdown.line_items if i.feature_id == "third-party-integrations")
        assert item.amount == 1000

    def test_numeric_integration_count(self):
        breakdown = calculate_pricing({"features": ["Integrations"], "integrations": 4})
        item = next(i for i in breakdown.line_items if i.feature_id == "third-party-integrations")
        assert item.amount == 4000
