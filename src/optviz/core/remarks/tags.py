from __future__ import annotations

from optviz.core.remarks.model import RemarkKind


_TAG_REGISTRY: dict[str, RemarkKind] = {kind.value: kind for kind in RemarkKind}

DEFAULT_REMARK_KIND = RemarkKind.ANALYSIS


def known_tags() -> tuple[str, ...]:
    return tuple(_TAG_REGISTRY)


def classify_tag(token: object) -> RemarkKind | None:
    """
    Map a remark tag token (``Passed``, ``Missed``, ``Analysis``) to its kind.

    Matching is exact and case-sensitive; anything else returns None.
    """
    if not isinstance(token, str):
        return None
    return _TAG_REGISTRY.get(token)


def resolve_kind(token: object) -> RemarkKind:
    """Classify ``token`` and fall back to ``Analysis`` when it is not recognized."""
    kind = classify_tag(token)
    return kind if kind is not None else DEFAULT_REMARK_KIND
