"""
Sorting Utilities Module

Provides sorting functions for payroll recap output.
"""

import unicodedata
from typing import List

from domain.entities import RecapEntry


def get_name_sort_key(name: str) -> tuple:
    """
    Get sort key for a display name, ignoring case and accents.
    Returns tuple of (folded_name, original_name) for stable sorting.
    """
    if not name:
        return ("", "")
    decomposed = unicodedata.normalize("NFKD", name)
    folded = "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()
    return (folded, name)


def sort_recap(
    recap: List[RecapEntry],
    sort_by: str = "lateness"
) -> List[RecapEntry]:
    """
    Sort recap entries by specified criteria.

    Args:
        recap: List of RecapEntry objects
        sort_by: Sorting method - "lateness", "deduction" or "name"

    Returns:
        Sorted list (new list, does not modify original)
    """
    if sort_by == "name":
        return sorted(recap, key=lambda e: get_name_sort_key(e.name))
    elif sort_by == "deduction":
        # Highest deduction first
        return sorted(recap, key=lambda e: -e.deduction)
    else:
        # Default: worst cumulated lateness first
        return sorted(recap, key=lambda e: -e.late_cumul_minutes)
