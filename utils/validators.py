from __future__ import annotations

import math
from typing import Optional, Union

CountInput = Union[int, float, str, None]


def sanitize_count(value: CountInput) -> Optional[int]:
    """
    Normalize a typed attendee count.

    - None / "" -> None (field left empty)
    - leading zeros are dropped ("007" -> 7)
    - negative, non-numeric or non-finite ("1e400", inf, nan) -> 0
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return max(0, value)
    if isinstance(value, float):
        return max(0, int(value)) if math.isfinite(value) else 0

    text = str(value).strip()
    if text == "":
        return None
    text = text.lstrip("0") or "0"
    try:
        number = float(text)
    except ValueError:
        return 0
    if not math.isfinite(number):
        return 0
    return max(0, int(number))


def compute_total(deaf: Optional[int], hearing: Optional[int]) -> int:
    return (deaf or 0) + (hearing or 0)


def has_changes(
    deaf: Optional[int],
    hearing: Optional[int],
    original_deaf: Optional[int],
    original_hearing: Optional[int],
) -> bool:
    # empty fields are saved as 0, compare the same way
    return (hearing or 0) != original_hearing or (deaf or 0) != original_deaf
