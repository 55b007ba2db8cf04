"""Reclaim data models."""

from reclaim.models.category import CATEGORIES, Category
from reclaim.models.scan_result import CleanableItem, ScanResult, ScanSummary
from reclaim.models.clean_result import CleanResult, CleanSummary
from reclaim.models.duplicate_group import DuplicateGroup, DuplicateReport
from reclaim.models.scanner import Scanner, ScannerOptions

__all__ = [
    "CATEGORIES",
    "Category",
    "CleanResult",
    "CleanSummary",
    "CleanableItem",
    "DuplicateGroup",
    "DuplicateReport",
    "ScanResult",
    "ScanSummary",
    "Scanner",
    "ScannerOptions",
]
