"""
TwinSync Monitoring Module

Debounced filesystem watching for the tracked pair.

Author: TwinSync Project
License: MIT
"""

from .watcher import PairWatcher, DebouncedEventHandler, ChangeEvent, EventKind

__all__ = ['PairWatcher', 'DebouncedEventHandler', 'ChangeEvent', 'EventKind']
