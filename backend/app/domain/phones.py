"""
Phone number normalization.

Members are matched by phone, so every phone that enters the system is
brought to E.164 with US heuristics:
    10 digits               -> +1XXXXXXXXXX
    11 digits starting 1    -> +1XXXXXXXXXX
    leading '+'             -> '+' followed by its digits
    anything else non-empty -> '+' followed by its digits
"""

import re
from typing import Optional

_NON_DIGITS = re.compile(r"[^\d]")
_SPREADSHEET_DECIMAL = re.compile(r"\.0+$")


def normalize_to_e164(raw) -> Optional[str]:
    """Return the E.164 form of ``raw`` or None when it holds no digits."""
    if raw is None:
        return None
    value = str(raw).strip()
    # Spreadsheet exports turn phone columns into floats: 15127347426.0
    value = _SPREADSHEET_DECIMAL.sub("", value)
    value = value.strip('"').strip()
    if not value:
        return None

    if value.startswith("+"):
        digits = _NON_DIGITS.sub("", value[1:])
        return f"+{digits}" if digits else None

    digits = _NON_DIGITS.sub("", value)
    if not digits:
        return None
    if len(digits) == 10:
        return f"+1{digits}"
    if len(digits) == 11 and digits.startswith("1"):
        return f"+{digits}"
    return f"+{digits}"
