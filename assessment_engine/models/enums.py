from enum import Enum


class ModifierKind(str, Enum):
    ADDITIVE = "additive"
    MULTIPLICATIVE = "multiplicative"


class LineItemKind(str, Enum):
    BASE = "base"
    ADDITIVE = "additive"
    MULTIPLICATIVE = "multiplicative"
    COMPLEXITY = "complexity"


class AssessmentStatus(str, Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    CONTACTED = "contacted"
    ARCHIVED = "archived"


class BudgetAlignment(str, Enum):
    ALIGNED = "aligned"
    UNDER_BUDGET = "under-budget"
    OVER_BUDGET = "over-budget"
    SIGNIFICANTLY_OVER = "significantly-over"
    UNDISCLOSED = "undisclosed"


class ContentSource(str, Enum):
    AI = "ai"
    TEMPLATE = "template"
