"""
Proposal Export — renders a ProposalDocument for download.

  txt         → plain text, one ruled section per proposal part
  html / pdf  → printable HTML (the browser's print dialog produces the PDF)

Suggestions are appended after the proposal when present.
"""

from __future__ import annotations

import html
import logging
from typing import Sequence

from assessment_engine.config import get_settings
from assessment_engine.models.enums import LineItemKind
from assessment_engine.models.schemas import LineItem, ProposalDocument
from assessment_engine.utils.formatting import money

logger = logging.getLogger(__name__)

RULE_WIDTH = 80

# format → (media type, file extension, content disposition)
EXPORT_FORMATS: dict[str, tuple[str, str, str]] = {
    "txt": ("text/plain", "txt", "attachment"),
    "html": ("text/html", "html", "inline"),
    "pdf": ("text/html", "html", "inline"),
}


class UnsupportedExportFormat(ValueError):
    def __init__(self, export_format: str):
        super().__init__(f"Unsupported format: {export_format}")
        self.export_format = export_format


# ── Sections ─────────────────────────────────────────────

def _numbered(items: Sequence[str]) -> list[str]:
    return [f"{i}. {item}" for i, item in enumerate(items, start=1)]


def _line_item_text(item: LineItem, currency: str) -> str:
    if item.kind is LineItemKind.MULTIPLICATIVE:
        return f"  {item.label}: {item.value:+.0%} ({money(item.amount, currency)})"
    return f"  {item.label}: {money(item.amount, currency)}"


def proposal_sections(
    proposal: ProposalDocument,
    suggestions: Sequence[str] = (),
) -> list[tuple[str, list[str]]]:
    """(heading, lines) pairs shared by the text and HTML renderings."""
    overview = proposal.project_overview
    scope = proposal.scope_of_work
    timeline = proposal.timeline
    pricing = proposal.pricing
    currency = pricing.breakdown.currency

    sections: list[tuple[str, list[str]]] = []

    lines = [
        f"Project Name: {overview.project_name or '-'}",
        f"Project Type: {overview.project_type or '-'}",
    ]
    if overview.description:
        lines += ["", "Description:", overview.description]
    if overview.target_audience:
        lines += ["", "Target Audience:", overview.target_audience]
    if overview.main_goals:
        lines += ["", "Main Goals:", *_numbered(overview.main_goals)]
    if proposal.narrative:
        lines += ["", proposal.narrative]
    sections.append(("Project Overview", lines))

    lines = [f"Platforms: {', '.join(scope.platforms) or '-'}", "", "Features:", *_numbered(scope.features)]
    if scope.nice_to_have_features:
        lines += ["", "Nice to Have:", *_numbered(scope.nice_to_have_features)]
    if scope.integrations:
        lines += ["", "Integrations:", *_numbered(scope.integrations)]
    if scope.technical_requirements:
        lines += ["", "Technical Requirements:", *_numbered(scope.technical_requirements)]
    sections.append(("Scope of Work", lines))

    lines = [
        f"Total Duration: {timeline.total_duration}",
        f"Estimated Start Date: {timeline.start_date.isoformat()}",
    ]
    for index, phase in enumerate(timeline.phases, start=1):
        lines += ["", f"Phase {index}: {phase.phase} ({phase.duration})"]
        lines += [f"  • {d}" for d in phase.deliverables]
    sections.append(("Project Timeline", lines))

    lines = [_line_item_text(item, currency) for item in pricing.breakdown.line_items]
    lines += [
        "",
        f"FINAL TOTAL: {money(pricing.final_total, currency)}",
        "",
        "Payment Schedule:",
        *_numbered([
            f"{m.milestone}: {money(m.amount, currency)} ({m.due})"
            for m in pricing.payment_schedule
        ]),
    ]
    sections.append(("Pricing Breakdown", lines))

    sections.append(("Deliverables", _numbered(proposal.deliverables)))

    expectations = proposal.expectations
    sections.append(("Project Expectations", [
        "Client Responsibilities:",
        *_numbered(expectations.client_responsibilities),
        "",
        "Our Commitments:",
        *_numbered(expectations.our_commitments),
        "",
        f"Communication: {expectations.communication}",
    ]))

    if proposal.special_notes:
        sections.append(("Special Notes", proposal.special_notes.splitlines()))

    sections.append(("Next Steps", _numbered(proposal.next_steps)))

    if suggestions:
        sections.append(("Project Suggestions & Recommendations", [f"- {s}" for s in suggestions]))

    return sections


def _header_lines(proposal: ProposalDocument) -> list[str]:
    lines = []
    if proposal.client_name:
        lines.append(f"Prepared for: {proposal.client_name}")
    if proposal.client_email:
        lines.append(f"Email: {proposal.client_email}")
    lines.append(f"Date: {proposal.proposal_date.isoformat()}")
    return lines


def _footer_lines() -> list[str]:
    settings = get_settings()
    lines = []
    if settings.company_name:
        lines.append(f"Prepared by {settings.company_name}")
    if settings.company_contact:
        lines.append(settings.company_contact)
    return lines


# ── Renderers ────────────────────────────────────────────

def format_proposal_text(proposal: ProposalDocument, suggestions: Sequence[str] = ()) -> str:
    heavy = "=" * RULE_WIDTH
    light = "-" * RULE_WIDTH

    out = [proposal.title, heavy, "", *_header_lines(proposal)]
    for heading, lines in proposal_sections(proposal, suggestions):
        out += ["", heavy, "", heading.upper(), light, *lines]

    footer = _footer_lines()
    if footer:
        out += ["", heavy, "", *footer]
    return "\n".join(out) + "\n"


_HTML_STYLE = """
    body { font-family: Arial, sans-serif; padding: 40px; line-height: 1.6; }
    h1 { color: #2563eb; border-bottom: 3px solid #2563eb; padding-bottom: 10px; }
    h2 { color: #1e40af; margin-top: 30px; border-bottom: 2px solid #e5e7eb; padding-bottom: 5px; }
    .header { text-align: center; margin-bottom: 40px; }
    .section p { margin: 0; white-space: pre-wrap; }
    .footer { margin-top: 40px; color: #6b7280; }
    @media print { body { padding: 20px; } }
"""


def format_proposal_html(proposal: ProposalDocument, suggestions: Sequence[str] = ()) -> str:
    """Printable HTML; every answer-derived string is escaped."""
    esc = html.escape
    parts = [
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        '  <meta charset="UTF-8">',
        f"  <title>{esc(proposal.title)}</title>",
        f"  <style>{_HTML_STYLE}  </style>",
        "</head>",
        "<body>",
        '  <div class="header">',
        f"    <h1>{esc(proposal.title)}</h1>",
        *[f"    <p>{esc(line)}</p>" for line in _header_lines(proposal)],
        "  </div>",
    ]
    for heading, lines in proposal_sections(proposal, suggestions):
        parts.append('  <div class="section">')
        parts.append(f"    <h2>{esc(heading)}</h2>")
        parts += [f"    <p>{esc(line) or '&nbsp;'}</p>" for line in lines]
        parts.append("  </div>")

    footer = _footer_lines()
    if footer:
        parts.append('  <div class="footer">')
        parts += [f"    <p>{esc(line)}</p>" for line in footer]
        parts.append("  </div>")
    parts += ["</body>", "</html>"]
    return "\n".join(parts) + "\n"


def export_proposal(
    proposal: ProposalDocument,
    suggestions: Sequence[str] = (),
    export_format: str = "pdf",
) -> tuple[str, str, str]:
    """
    Render *proposal* as (body, media_type, content_disposition).
    Raises UnsupportedExportFormat for anything but txt, html or pdf.
    """
    if export_format not in EXPORT_FORMATS:
        raise UnsupportedExportFormat(export_format)

    media_type, extension, disposition = EXPORT_FORMATS[export_format]
    if export_format == "txt":
        body = format_proposal_text(proposal, suggestions)
    else:
        body = format_proposal_html(proposal, suggestions)

    filename = f"proposal-{proposal.assessment_id}.{extension}"
    logger.info(f"Exported proposal {proposal.assessment_id} as {export_format} ({len(body)} chars)")
    return body, media_type, f'{disposition}; filename="{filename}"'
