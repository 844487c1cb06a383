"""
Triage

Notification importance scoring that learns from how the user reacts.

Philosophy:
- Every score is explainable: each factor is reported separately
- Optional signals fail open: missing state or a failed LLM call never blocks scoring
- Learning is bounded: adjustments stay within +/-20 and need at least 5 samples

Usage:
    from triage.common import load_config
    from triage.common.schemas import NotificationEvent
    from triage.classifier import NotificationProcessor, ImportanceScorer
    from triage.learning import BehaviorStore, BehaviorLearner, BehaviorUpdater
"""

__version__ = "0.1.0"
