from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any


def iso_now() -> str:
    # Use UTC ISO timestamps for consistency.
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def safe_div(n: float, d: float) -> float:
    return float(n) / float(d) if d else 0.0


def to_float(v: Any) -> float:
    """Lenient numeric coercion for submitted counts: anything unusable becomes 0.0."""
    if v is None or isinstance(v, bool):
        return 0.0
    try:
        f = float(str(v).strip()) if isinstance(v, str) else float(v)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(f) or math.isinf(f):
        return 0.0
    return f
