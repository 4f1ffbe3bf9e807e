import re
from datetime import datetime, timezone

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ns|us|µs|μs|ms|s|m|h)")
_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,  # micro sign
    "μs": 1e-6,  # greek mu
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def parse_duration(text: str) -> float:
    """
    Parse a duration into seconds.

    Accepts bare seconds ("0.5") or unit-suffixed parts that may be chained
    ("200ms", "4s", "1m30s"). Units are ns, us (or µs), ms, s, m and h.
    """
    text = text.strip()
    try:
        value = float(text)
    except ValueError:
        pass
    else:
        if value < 0:
            raise ValueError(f"Negative duration: {text}")
        return value

    pos = 0
    total = 0.0
    for m in _DURATION_PART.finditer(text):
        if m.start() != pos:
            break
        total += float(m.group(1)) * _UNIT_SECONDS[m.group(2)]
        pos = m.end()

    if pos == 0 or pos != len(text):
        raise ValueError(f"Invalid duration: {text!r}")
    return total
