"""
LLM Service — Groq client for the optional prose in assessments.

Two callers use it: project suggestions (one suggestion per line) and the
proposal narrative (a few paragraphs).  Pricing never touches it.

  - ai_available()    → whether prose should be requested at all
  - get_llm()         → shared ChatGroq client
  - llm_text_call()   → prompt in, stripped-or-empty text out

Every exception raised here is recoverable for the callers: they log a
warning and use their template text instead.
"""

from __future__ import annotations

import logging
import time

from assessment_engine.config import get_settings

logger = logging.getLogger(__name__)

_llm_instance = None


def ai_available() -> bool:
    """True when text generation is enabled and a Groq key is configured."""
    settings = get_settings()
    return settings.ai_enabled and bool(settings.groq_api_key)


def get_llm():
    """Return the shared ChatGroq client, created on first use."""
    global _llm_instance
    if _llm_instance is not None:
        return _llm_instance

    settings = get_settings()
    if not settings.groq_api_key:
        raise ValueError("GROQ_API_KEY is not set; suggestions and proposals fall back to templates")

    from langchain_groq import ChatGroq

    _llm_instance = ChatGroq(
        api_key=settings.groq_api_key,
        model=settings.llm_model,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
    )
    logger.info(f"Assessment prose model ready: {settings.llm_model}")
    return _llm_instance


def llm_text_call(prompt: str, max_retries: int = 0) -> str:
    """
    Send *prompt* and return the reply text.

    An empty reply is retried up to *max_retries* times; if every attempt is
    empty the empty string is returned and the caller uses its template.
    """
    llm = get_llm()
    attempts = max_retries + 1
    logger.debug(f"[prose] prompt {len(prompt)} chars, up to {attempts} attempt(s)")

    content = ""
    for attempt in range(1, attempts + 1):
        started = time.perf_counter()
        response = llm.invoke(prompt)
        elapsed = time.perf_counter() - started
        content = response.content or ""

        meta = getattr(response, "response_metadata", {}) or {}
        usage = meta.get("token_usage") or meta.get("usage", {})
        logger.info(
            f"[prose] attempt {attempt}/{attempts}: {len(content)} chars in {elapsed:.2f}s "
            f"(finish_reason={meta.get('finish_reason', 'unknown')}, tokens={usage})"
        )
        if content.strip():
            return content

    logger.warning(f"[prose] empty reply after {attempts} attempt(s)")
    return content
