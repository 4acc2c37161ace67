"""
TwinSync Core Module

Pair validation, startup reconciliation, the sync loop and the
orchestrator that runs them in order.

Author: TwinSync Project
License: MIT
"""

from .orchestrator import PairSyncService, canonicalize
from .validator import PairValidator
from .classifier import TextClassifier, Classification, ContentEncoding
from .reconciler import Reconciler, ReconcileResult, SyncDecision, Direction
from .sync_loop import SyncLoop, PairState, TrackedFile, SyncResult, SyncStatus

__all__ = [
    'PairSyncService', 'canonicalize',
    'PairValidator',
    'TextClassifier', 'Classification', 'ContentEncoding',
    'Reconciler', 'ReconcileResult', 'SyncDecision', 'Direction',
    'SyncLoop', 'PairState', 'TrackedFile', 'SyncResult', 'SyncStatus',
]
