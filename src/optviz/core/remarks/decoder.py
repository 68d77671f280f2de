from __future__ import annotations

import logging
from typing import Any

import yaml

from optviz.core.remarks.patterns import MARKER_TAG_PATTERN, REMARK_TYPE_FIELD
from optviz.core.remarks.tags import classify_tag, known_tags


logger = logging.getLogger(__name__)


class RemarkLoader(yaml.SafeLoader):
    """SafeLoader that understands the local tags found in compiler remark logs."""


def _construct_tagged_node(loader: RemarkLoader, tag_suffix: str, node: yaml.Node) -> Any:
    if isinstance(node, yaml.ScalarNode):
        return loader.construct_scalar(node)
    if isinstance(node, yaml.SequenceNode):
        return loader.construct_sequence(node, deep=True)
    data = loader.construct_mapping(node, deep=True)
    kind = classify_tag(tag_suffix)
    if kind is not None:
        data[REMARK_TYPE_FIELD] = kind.value
    return data


# Locally tagged nodes load as plain values; only registered remark kinds get a discriminator.
RemarkLoader.add_multi_constructor("!", _construct_tagged_node)


def load_document(span_text: str) -> Any:
    """Load a single YAML document. Raises ``yaml.YAMLError`` on malformed input.

    Constructor failures such as an impossible implicit timestamp surface as
    ``ValueError`` or ``TypeError``.
    """
    return yaml.load(span_text, Loader=RemarkLoader)


def _tag_from_marker_line(span_text: str) -> str | None:
    first_line = span_text.split("\n", 1)[0]
    m = MARKER_TAG_PATTERN.match(first_line)
    if not m:
        return None
    token = m.group("tag")
    return token if token in known_tags() else None


def decode_document(span_text: str) -> dict | None:
    """
    Decode one document span into a mapping with a resolved discriminator.

    Args:
        span_text: Document text, starting with its ``---`` marker line.

    Returns:
        dict | None: The loaded mapping, or None when the span is malformed,
        empty, or does not decode to a mapping.

    Notes:
        When the loader did not set ``RemarkType``, the tag on the marker line is
        used instead, provided it is one of the recognized remark kinds.
    """
    if not span_text.strip():
        return None
    try:
        loaded = load_document(span_text)
    except (yaml.YAMLError, ValueError, TypeError) as exc:
        logger.debug("Skipping malformed remark document: %s", exc)
        return None

    if not isinstance(loaded, dict):
        return None

    if REMARK_TYPE_FIELD not in loaded:
        tag = _tag_from_marker_line(span_text)
        if tag is not None:
            loaded[REMARK_TYPE_FIELD] = tag
    return loaded


__all__ = ["RemarkLoader", "decode_document", "load_document"]
