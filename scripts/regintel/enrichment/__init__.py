"""
Keyword-driven enrichment of regulatory content.

Analysis, prioritization, templated content expansion and approval scoring.
"""

from .analysis import (
    LegalCaseAnalysis,
    PriorityAssessment,
    RegulatoryAnalysis,
    analyze_legal_case,
    analyze_market_trends,
    analyze_regulatory_content,
    prioritize_update,
)
from .approval import ApprovalDecision, ApprovalService, QualityMetrics
from .enhancer import ContentEnhancer, is_enhanced, mass_enhance_all

__all__ = [
    "RegulatoryAnalysis",
    "PriorityAssessment",
    "LegalCaseAnalysis",
    "analyze_regulatory_content",
    "analyze_legal_case",
    "analyze_market_trends",
    "prioritize_update",
    "ApprovalService",
    "ApprovalDecision",
    "QualityMetrics",
    "ContentEnhancer",
    "is_enhanced",
    "mass_enhance_all",
]
