from typing import Optional

from dropfiles.models import RangeStatus, ServingPlan


def _parse_offset(text: str) -> Optional[int]:
    text = text.strip()
    if text and text.isascii() and text.isdigit():
        return int(text)
    return None


def resolve_range(range_header: Optional[str], total_length: int) -> ServingPlan:
    """Turn a ``Range`` header into a serving plan for ``total_length`` bytes.

    Only ``start-end`` and ``start-`` are understood. Fields that are empty
    or not plain digits count as missing (start defaults to 0, end to the
    last byte), so a suffix request like ``-500`` reads as ``0-500``. Of a
    multi-range request only the first range is served.
    """
    last = total_length - 1
    if not range_header or not range_header.strip():
        return ServingPlan(status=RangeStatus.FULL, start=0, end=last, total_length=total_length)

    spec = range_header.strip()
    if spec.startswith("bytes="):
        spec = spec[len("bytes="):]
    spec = spec.split(",", 1)[0]

    parts = spec.split("-")
    start = _parse_offset(parts[0])
    end = _parse_offset(parts[1]) if len(parts) > 1 else None
    if start is None:
        start = 0
    if end is None:
        end = last

    if start > end or start >= total_length:
        return ServingPlan(
            status=RangeStatus.UNSATISFIABLE, start=0, end=-1, total_length=total_length
        )
    if end > last:
        end = last
    return ServingPlan(status=RangeStatus.PARTIAL, start=start, end=end, total_length=total_length)
