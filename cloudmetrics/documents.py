"""
YAML document streams and JSON-safe document trees.

Write requests carry one or more YAML documents. They are decoded lazily,
one record at a time, with a strict loader: duplicate keys are rejected and
timestamps stay strings. Decoded trees are normalized before they are
stored as JSON, since YAML allows mapping keys that JSON cannot represent.

Usage:
    from cloudmetrics.documents import load_documents, normalize, to_json

    for index, doc in load_documents(body, "exporter"):
        config_json = to_json(normalize(doc["config"]))
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator
from typing import Any, TypeVar, Union

import yaml
from pydantic import BaseModel, ValidationError

from cloudmetrics.errors import DecodeError, ShapeError

logger = logging.getLogger(__name__)

# Scalar | Sequence | Mapping
DocumentTree = Union[str, int, float, bool, None, list["DocumentTree"], dict[str, "DocumentTree"]]

MAX_DOCUMENT_DEPTH = 64
MAX_DOCUMENT_NODES = 100_000

_JSON_SCALARS = (str, int, float, bool, type(None))
_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"
_MERGE_TAG = "tag:yaml.org,2002:merge"

RecordT = TypeVar("RecordT", bound=BaseModel)


class StrictLoader(yaml.SafeLoader):
    """SafeLoader that rejects duplicate mapping keys and keeps timestamps as text."""

    def construct_mapping(self, node: yaml.MappingNode, deep: bool = False) -> dict:
        seen: list[tuple[str, Any]] = []
        for key_node, _ in node.value:
            if key_node.tag == _MERGE_TAG:
                continue
            key = self.construct_object(key_node, deep=True)
            marker = (type(key).__name__, key)
            if marker in seen:
                raise yaml.constructor.ConstructorError(
                    "while constructing a mapping",
                    node.start_mark,
                    f"found duplicate key {key!r}",
                    key_node.start_mark,
                )
            seen.append(marker)
        return super().construct_mapping(node, deep=deep)


StrictLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def load_documents(body: bytes | str, resource: str) -> Iterator[tuple[int, dict]]:
    """Yield ``(index, mapping)`` for each non-empty document in a YAML stream.

    `index` is the zero-based position among the records decoded so far.
    Raises DecodeError for malformed YAML or a document that is not a mapping.
    """
    index = 0
    stream = yaml.load_all(body, Loader=StrictLoader)
    while True:
        try:
            doc = next(stream)
        except StopIteration:
            return
        except yaml.YAMLError as e:
            raise DecodeError(resource, index, str(e)) from e
        except RecursionError as e:
            raise DecodeError(resource, index, "document is nested too deeply") from e

        if doc is None:
            continue
        if not isinstance(doc, dict):
            raise DecodeError(resource, index, f"expected a YAML map, got {type(doc).__name__}")
        yield index, doc
        index += 1


def parse_records(
    body: bytes | str, schema: type[RecordT], resource: str
) -> Iterator[tuple[int, RecordT]]:
    """Decode a document stream into `schema` records, one at a time.

    The schema forbids unknown fields, so a typo in a field name is an error
    rather than silently dropped data.
    """
    for index, doc in load_documents(body, resource):
        try:
            record = schema.model_validate(doc)
        except ValidationError as e:
            raise DecodeError(resource, index, describe_validation_error(e)) from e
        yield index, record


def describe_validation_error(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "record"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def normalize(node: Any, *, max_nodes: int = MAX_DOCUMENT_NODES) -> DocumentTree:
    """Return `node` with every mapping keyed by strings.

    Sequences keep their order; JSON scalars pass through unchanged.
    Raises ShapeError for a non-string key, a value JSON cannot hold,
    nesting deeper than MAX_DOCUMENT_DEPTH, or a tree that expands to more
    than `max_nodes` values. YAML aliases share one object per anchor, so
    the expanded size can be exponential in the size of the body.
    """
    remaining = [max_nodes]
    return _normalize(node, 0, remaining)


def _normalize(node: Any, depth: int, remaining: list[int]) -> DocumentTree:
    if depth > MAX_DOCUMENT_DEPTH:
        raise ShapeError(f"document is nested deeper than {MAX_DOCUMENT_DEPTH} levels")
    remaining[0] -= 1
    if remaining[0] < 0:
        raise ShapeError("document expands to too many values (check for nested aliases)")

    if isinstance(node, dict):
        converted: dict[str, DocumentTree] = {}
        for key, value in node.items():
            if not isinstance(key, str):
                raise ShapeError("map is invalid (keys must be strings)")
            converted[key] = _normalize(value, depth + 1, remaining)
        return converted
    if isinstance(node, list):
        return [_normalize(item, depth + 1, remaining) for item in node]
    if isinstance(node, _JSON_SCALARS):
        return node
    raise ShapeError(f"unsupported value of type {type(node).__name__}")


def to_json(tree: DocumentTree) -> str:
    """Compact JSON text for a normalized tree."""
    try:
        return json.dumps(tree, separators=(",", ":"), allow_nan=False)
    except ValueError as e:
        raise ShapeError(str(e)) from e


def dump_documents(docs: Iterable[dict]) -> str:
    """Encode read results as a YAML document stream, one document per resource."""
    return yaml.safe_dump_all(
        list(docs), sort_keys=False, default_flow_style=False, allow_unicode=True
    )
