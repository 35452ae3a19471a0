from typing import Any, Dict, List


def number_versions(rows_oldest_first: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Attach 1-based version_number by creation order and return newest first.

    Numbers are derived on every read; deleting an older generation shifts
    the numbers of everything after it.
    """
    numbered = [
        {**row, "version_number": index}
        for index, row in enumerate(rows_oldest_first, start=1)
    ]
    numbered.reverse()
    return numbered
