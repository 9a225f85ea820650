"""Creation-timestamp repair: heuristic, corrector, reactive and batch paths."""
from .batch import BatchReconciler, BatchSummary, ProgressSink
from .corrector import CorrectionOutcome, ItemCorrector
from .guard import ReentrancyGuard
from .heuristic import CorrectionDecision, decide, is_acceptable_candidate, is_bad_timestamp
from .service import DateCreatedFixerService

__all__ = [
    "BatchReconciler",
    "BatchSummary",
    "ProgressSink",
    "CorrectionOutcome",
    "ItemCorrector",
    "ReentrancyGuard",
    "CorrectionDecision",
    "decide",
    "is_acceptable_candidate",
    "is_bad_timestamp",
    "DateCreatedFixerService",
]
