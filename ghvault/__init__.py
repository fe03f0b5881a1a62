"""
ghvault - Snapshot every repo you can reach into one backup repository.

"History is optional. The working tree is forever." — schema.cx
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .config import Settings
from .models import BackupOutcome, RunSummary

__all__ = [
    "BackupOutcome",
    "RunSummary",
    "Settings",
    "__version__",
]
