from __future__ import annotations

from typing import Iterable, Optional, Tuple, Union


def parse_tags(value: Union[None, str, Iterable[str]]) -> Tuple[str, ...]:
    """Accept "a, b" or ["a", "b"]; drop blanks and duplicates, keep order."""
    if value is None:
        return ()
    parts = value.split(",") if isinstance(value, str) else [str(v) for v in value]
    out: list[str] = []
    for p in parts:
        tag = p.strip()
        if tag and tag not in out:
            out.append(tag)
    return tuple(out)


def tags_to_str(tags: Iterable[str]) -> Optional[str]:
    joined = ",".join(tags)
    return joined or None
