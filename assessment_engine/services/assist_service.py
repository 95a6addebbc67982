"""
Assist Service — deterministic helpers behind the wizard's assistant panel.

  - generate_ideas()         → starter ideas for a project type
  - suggest_features()       → common features for a type, minus those chosen
  - clarifying_questions()   → up to three questions for missing answers
  - improve_description()    → light clean-up of a free-text description
  - assist()                 → dispatch on the request type
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from assessment_engine.utils.answers import fold_keys, get_list, get_str

logger = logging.getLogger(__name__)

MAX_IDEAS = 4
MAX_QUESTIONS = 3
SHORT_DESCRIPTION = 50

FEATURE_SUGGESTIONS: dict[str, list[str]] = {
    "website": [
        "Contact form",
        "Blog/News section",
        "Image gallery",
        "SEO optimization",
        "Analytics integration",
        "Social media integration",
        "Newsletter signup",
        "Testimonials section",
    ],
    "web-app": [
        "User dashboard",
        "Data visualization",
        "File upload/download",
        "Search functionality",
        "Notifications",
        "Export/Import data",
        "Admin panel",
        "User roles & permissions",
    ],
    "mobile-app": [
        "Push notifications",
        "Offline mode",
        "Biometric authentication",
        "Location services",
        "Camera integration",
        "Social sharing",
        "In-app purchases",
        "Analytics tracking",
    ],
    "ecommerce": [
        "Product catalog",
        "Shopping cart",
        "Payment gateway",
        "Order management",
        "Inventory tracking",
        "Customer reviews",
        "Wishlist",
        "Shipping calculator",
    ],
    "saas": [
        "Subscription management",
        "Billing system",
        "User onboarding",
        "Usage analytics",
        "API access",
        "Team collaboration",
        "Data export",
        "Custom branding",
    ],
}

FALLBACK_IDEAS: dict[str, list[str]] = {
    "website": [
        "Create a modern, responsive design that works on all devices",
        "Include a blog section to share updates and improve SEO",
        "Add a contact form with automated email notifications",
        "Integrate social media links and sharing buttons",
    ],
    "web-app": [
        "Build a user-friendly dashboard for data visualization",
        "Implement secure user authentication and authorization",
        "Add real-time updates for collaborative features",
        "Create an admin panel for content management",
    ],
    "mobile-app": [
        "Design an intuitive mobile-first user interface",
        "Implement push notifications for user engagement",
        "Add offline functionality for better user experience",
        "Integrate with device features like camera and GPS",
    ],
    "ecommerce": [
        "Create a seamless shopping experience with easy checkout",
        "Implement product search and filtering capabilities",
        "Add customer reviews and ratings for social proof",
        "Include inventory management and order tracking",
    ],
}

GENERIC_IDEAS: list[str] = [
    "Focus on user experience and intuitive navigation",
    "Ensure the design is responsive and accessible",
    "Plan for scalability and future growth",
    "Consider integration with existing business tools",
]

# Context keyword groups → extra ideas, checked in this order
CONTEXT_IDEAS: tuple[tuple[tuple[str, ...], tuple[str, ...]], ...] = (
    (("ecommerce", "shop", "store"), (
        "Consider implementing a wishlist feature for better user engagement",
        "Add product recommendations based on user behavior",
    )),
    (("saas", "subscription"), (
        "Implement a free trial period to attract users",
        "Create tiered pricing plans for different user needs",
    )),
    (("mobile", "app"), (
        "Design for both iOS and Android platforms",
        "Consider progressive web app (PWA) capabilities",
    )),
)


# ── Helpers ──────────────────────────────────────────────

def generate_ideas(context: str = "", project_type: str | None = None) -> list[str]:
    """Ideas for the project type, led by any that match the free-text context."""
    lowered = (context or "").lower()
    ideas: list[str] = []
    for keywords, extra in CONTEXT_IDEAS:
        if any(k in lowered for k in keywords):
            ideas.extend(extra)
    ideas.extend(FALLBACK_IDEAS.get(project_type or "", GENERIC_IDEAS))
    return list(dict.fromkeys(ideas))[:MAX_IDEAS]


def suggest_features(project_type: str | None, current: Iterable[str] = ()) -> list[str]:
    """Common features for *project_type* that are not already selected."""
    chosen = {c.strip().casefold() for c in current if isinstance(c, str)}
    return [
        f for f in FEATURE_SUGGESTIONS.get(project_type or "", [])
        if f.casefold() not in chosen
    ]


def clarifying_questions(answers: Mapping[str, Any] | None) -> list[str]:
    folded = fold_keys(answers)
    project_type = get_str(folded, "project_type")
    questions: list[str] = []

    if not project_type:
        questions.append("What type of project are you building? (website, web app, mobile app, etc.)")
    if not get_str(folded, "target_audience"):
        questions.append("Who is your target audience? (age, demographics, technical level)")
    if not get_list(folded, "main_goals"):
        questions.append("What are your main business goals for this project?")
    if project_type == "web-app" and not get_list(folded, "must_have_features"):
        questions.append("What are the must-have features for your web application?")
    if not get_str(folded, "budget_range"):
        questions.append("What is your budget range for this project?")

    return questions[:MAX_QUESTIONS]


def improve_description(text: str | None) -> str:
    """Capitalize, terminate, and nudge for detail when the text is short."""
    improved = (text or "").strip()
    if improved:
        improved = improved[0].upper() + improved[1:]
        if not improved.endswith((".", "!", "?")):
            improved += "."
    if len(improved) < SHORT_DESCRIPTION:
        improved = (
            f"{improved} Consider adding more details about your target users, "
            "key features, and business goals."
        ).strip()
    return improved


# ── Dispatch ─────────────────────────────────────────────

def assist(request_type: str, context: Any = "", current_answers: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Run one assistance request. Raises ValueError for an unknown type."""
    folded = fold_keys(current_answers)
    context_text = context if isinstance(context, str) else ""
    logger.debug(f"Assist request: {request_type}")

    if request_type == "generate-ideas":
        return {"suggestions": generate_ideas(context_text, get_str(folded, "project_type"))}
    if request_type == "suggest-features":
        # The wizard sends the project type as the context for this request
        project_type = context_text or get_str(folded, "project_type")
        return {"suggestions": suggest_features(project_type, get_list(folded, "must_have_features"))}
    if request_type == "improve-description":
        return {"improvedText": improve_description(context_text)}
    if request_type == "clarify-requirements":
        return {"suggestions": clarifying_questions(folded)}

    raise ValueError(f"Invalid assistance type: {request_type!r}")
