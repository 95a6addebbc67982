"""
Feature Registry — the fixed set of canonical FeatureIds.

Every modifier rule is keyed by an id from this registry, and every label the
questionnaire sends is resolved against the ids, display labels and synonyms
listed here.  Registration order is the order line items are listed in.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


class RuleTableError(ValueError):
    """Raised when the static feature/rule tables are inconsistent."""


@dataclass(frozen=True)
class FeatureDefinition:
    feature_id: str
    label: str
    category: str
    synonyms: tuple[str, ...] = ()
    selectable: bool = True  # False = only reachable through a single-choice answer


FEATURE_DEFINITIONS: tuple[FeatureDefinition, ...] = (
    # ── Authentication ───────────────────────────────────
    FeatureDefinition("basic-auth", "Basic Authentication", "Security",
                      ("user authentication", "login", "user accounts", "email login")),
    FeatureDefinition("social-login", "Social Login Integration", "Security",
                      ("social login", "oauth login", "google login", "facebook login")),
    FeatureDefinition("enterprise-sso", "Enterprise SSO", "Security",
                      ("single sign-on", "single sign on", "saml", "sso")),
    FeatureDefinition("custom-auth", "Custom Authentication", "Security",
                      ("custom login", "biometric authentication", "user roles & permissions")),

    # ── E-commerce ───────────────────────────────────────
    FeatureDefinition("payment-processing", "Payment Processing", "E-commerce",
                      ("payment gateway", "payments", "checkout", "billing system",
                       "subscription management", "in-app purchases")),
    FeatureDefinition("shopping-cart", "Shopping Cart", "E-commerce",
                      ("cart", "basket", "wishlist")),
    FeatureDefinition("inventory-management", "Inventory Management", "E-commerce",
                      ("inventory tracking", "inventory", "stock management", "product catalog")),
    FeatureDefinition("order-management", "Order Management", "E-commerce",
                      ("order tracking", "orders", "shipping calculator")),

    # ── Real-time ────────────────────────────────────────
    FeatureDefinition("real-time-chat", "Real-time Chat", "Real-time",
                      ("real time chat", "live chat", "chat", "messaging")),
    FeatureDefinition("real-time-updates", "Real-time Updates", "Real-time",
                      ("real time updates", "real-time features", "live updates", "websockets")),
    FeatureDefinition("live-collaboration", "Live Collaboration", "Real-time",
                      ("team collaboration", "collaborative editing", "collaboration")),

    # ── Content management ───────────────────────────────
    FeatureDefinition("basic-cms", "Basic CMS", "Content",
                      ("content management", "blog/news section", "blog")),
    FeatureDefinition("headless-cms", "Headless CMS Integration", "Content",
                      ("headless cms", "contentful", "strapi", "sanity")),
    FeatureDefinition("custom-cms", "Custom CMS", "Content",
                      ("custom content management",)),

    # ── API ──────────────────────────────────────────────
    FeatureDefinition("internal-api", "Internal API", "API",
                      ("backend api", "private api", "api integration")),
    FeatureDefinition("public-api", "Public API", "API",
                      ("api access", "developer api", "open api")),
    FeatureDefinition("api-documentation", "API Documentation", "API",
                      ("api docs", "swagger", "openapi documentation")),

    # ── Advanced ─────────────────────────────────────────
    FeatureDefinition("search-functionality", "Search Functionality", "Advanced",
                      ("search", "full-text search", "product search")),
    FeatureDefinition("analytics-dashboard", "Analytics Dashboard", "Advanced",
                      ("dashboard/analytics", "data visualization", "usage analytics",
                       "analytics", "reporting", "user dashboard")),
    FeatureDefinition("admin-panel", "Admin Panel", "Advanced",
                      ("admin dashboard", "back office", "backoffice")),
    FeatureDefinition("multi-language", "Multi-language Support", "Advanced",
                      ("multilingual", "internationalization", "i18n", "translations")),
    FeatureDefinition("notifications", "Notifications", "Advanced",
                      ("push notifications", "email notifications", "alerts")),

    # ── Platforms ────────────────────────────────────────
    FeatureDefinition("ios-app", "iOS Platform", "Platform", ("ios", "iphone app")),
    FeatureDefinition("android-app", "Android Platform", "Platform", ("android",)),
    FeatureDefinition("desktop-app", "Desktop Platform", "Platform",
                      ("desktop application", "desktop")),

    # ── Design ───────────────────────────────────────────
    FeatureDefinition("design-modern", "Modern Design", "Design"),
    FeatureDefinition("design-corporate", "Corporate Design", "Design"),
    FeatureDefinition("design-creative", "Creative Design", "Design"),
    FeatureDefinition("design-custom", "Custom Design", "Design", ("custom design system",)),

    # ── Integrations ─────────────────────────────────────
    FeatureDefinition("third-party-integrations", "Third-party Integrations", "Integrations",
                      ("third party integrations", "integrations")),

    # ── Data complexity ──────────────────────────────────
    FeatureDefinition("data-simple", "Simple Data Structure", "Complexity", selectable=False),
    FeatureDefinition("data-complex", "Complex Data Structure", "Complexity", selectable=False),
    FeatureDefinition("data-enterprise", "Enterprise-grade Data", "Complexity", selectable=False),

    # ── Accessibility ────────────────────────────────────
    FeatureDefinition("accessibility-wcag-aa", "WCAG AA Accessibility", "Accessibility",
                      ("wcag aa",)),
    FeatureDefinition("accessibility-wcag-aaa", "WCAG AAA Accessibility", "Accessibility",
                      ("wcag aaa",)),

    # ── Scale ────────────────────────────────────────────
    FeatureDefinition("high-traffic", "High-traffic Scalability", "Scale",
                      ("scalability", "high traffic")),

    # ── Timeline ─────────────────────────────────────────
    FeatureDefinition("timeline-rush", "Rush Timeline (ASAP)", "Timeline", selectable=False),
    FeatureDefinition("timeline-fast", "Fast Timeline (1-3 months)", "Timeline", selectable=False),
    FeatureDefinition("timeline-flexible", "Flexible Timeline", "Timeline", selectable=False),
)


class FeatureRegistry:
    """Lookup over an ordered tuple of FeatureDefinitions."""

    def __init__(self, definitions: Iterable[FeatureDefinition] = FEATURE_DEFINITIONS):
        self._definitions: tuple[FeatureDefinition, ...] = tuple(definitions)
        self._by_id: dict[str, FeatureDefinition] = {}
        self._order: dict[str, int] = {}

        for index, definition in enumerate(self._definitions):
            if definition.feature_id in self._by_id:
                raise RuleTableError(f"Duplicate feature id: {definition.feature_id}")
            if not definition.feature_id or not definition.label:
                raise RuleTableError(f"Feature definition #{index} has an empty id or label")
            self._by_id[definition.feature_id] = definition
            self._order[definition.feature_id] = index

    def __contains__(self, feature_id: object) -> bool:
        return feature_id in self._by_id

    def __iter__(self):
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def get(self, feature_id: str) -> FeatureDefinition | None:
        return self._by_id.get(feature_id)

    def label_for(self, feature_id: str) -> str:
        """Display name for a FeatureId (the id itself if unknown)."""
        definition = self._by_id.get(feature_id)
        return definition.label if definition else feature_id

    def category_for(self, feature_id: str) -> str:
        definition = self._by_id.get(feature_id)
        return definition.category if definition else ""

    def is_selectable(self, feature_id: str) -> bool:
        definition = self._by_id.get(feature_id)
        return bool(definition and definition.selectable)

    def ordered(self, feature_ids: Iterable[str]) -> list[str]:
        """Sort ids by registration order; unknown ids are dropped."""
        known = {f for f in feature_ids if f in self._by_id}
        return sorted(known, key=self._order.__getitem__)

    def keys(self) -> list[tuple[str, str]]:
        """All (registry key, feature_id) pairs: ids, labels and synonyms."""
        pairs: list[tuple[str, str]] = []
        for definition in self._definitions:
            pairs.append((definition.feature_id, definition.feature_id))
            pairs.append((definition.label, definition.feature_id))
            for synonym in definition.synonyms:
                pairs.append((synonym, definition.feature_id))
        return pairs


default_registry = FeatureRegistry()
