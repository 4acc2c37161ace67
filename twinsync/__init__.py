"""
TwinSync - keeps two files continuously mirrored.

Validates a file pair, reconciles pre-existing divergence once at startup,
then watches both files and copies each change onto the other side.

Author: TwinSync Project
License: MIT
"""

__version__ = "0.1.0"

from twinsync.core.orchestrator import PairSyncService
from twinsync.config.schema import Config

__all__ = ["PairSyncService", "Config", "__version__"]
