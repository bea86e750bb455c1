"""
PDF and text exports.
"""

from .pdf import (
    full_decision_text,
    historical_document_pdf,
    knowledge_article_pdf,
    legal_decision_pdf,
    newsletter_pdf,
    regulatory_update_pdf,
    split_text_into_lines,
)

__all__ = [
    "regulatory_update_pdf",
    "legal_decision_pdf",
    "historical_document_pdf",
    "knowledge_article_pdf",
    "newsletter_pdf",
    "full_decision_text",
    "split_text_into_lines",
]
