# backend/ops_core/common/sanitize.py
from __future__ import annotations

import re
from typing import Iterable, Optional

# C0 control characters plus DEL
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def sanitize_text(value: Optional[str]) -> Optional[str]:
    """
    Strip control characters and surrounding whitespace from free text.
    None stays None.
    """
    if value is None:
        return None
    return _CONTROL_CHARS.sub("", str(value)).strip()


def sanitize_list(values: Optional[Iterable[str]]) -> Optional[list[str]]:
    """
    Sanitize every item and drop the ones that end up empty.
    """
    if values is None:
        return None

    cleaned: list[str] = []
    for v in values:
        s = sanitize_text(v)
        if s:
            cleaned.append(s)
    return cleaned
