"""
Triage Common Module

Shared infrastructure for the classifier and learning packages.
"""

from .config import TriageConfig, load_config
from .errors import AdvisoryUnavailable, InvalidKeywordRule
from .llm_client import LLMClient

__all__ = [
    "TriageConfig",
    "load_config",
    "AdvisoryUnavailable",
    "InvalidKeywordRule",
    "LLMClient",
]
