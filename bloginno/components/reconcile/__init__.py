"""
Reconcile component - orphaned media detection and best-effort cleanup.
"""

from .component import CleanupQueue, find_orphans, orphans_from_urls, orphans_of_deleted
from .models import CleanupResult, OrphanedMedia

__all__ = [
    "CleanupQueue",
    "CleanupResult",
    "OrphanedMedia",
    "find_orphans",
    "orphans_from_urls",
    "orphans_of_deleted",
]
