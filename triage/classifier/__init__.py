"""
Triage Classifier

Identity extraction, heuristic scoring and the optional advisory override.
"""

from .content_extractor import ContentExtractor
from .scorer import ImportanceScorer, ScoreBreakdown, KeywordAnalysis, category_for
from .advisory import AdvisoryClassifier, AdvisoryVerdict
from .reconciler import AdvisoryReconciler, ReconcileResult, apply_verdict
from .pipeline import NotificationProcessor, ProcessedNotification

__all__ = [
    "ContentExtractor",
    "ImportanceScorer",
    "ScoreBreakdown",
    "KeywordAnalysis",
    "category_for",
    "AdvisoryClassifier",
    "AdvisoryVerdict",
    "AdvisoryReconciler",
    "ReconcileResult",
    "apply_verdict",
    "NotificationProcessor",
    "ProcessedNotification",
]
