"""Body codecs — JSON and XML marshaling plus typed dataclass building.

Encoders (``to_json``, ``to_xml``) feed the response envelopes and raise
``SerializationError``. Decoders (``from_json``, ``from_xml``) feed the
request binder and raise ``BindError``. Both decoders end in
``build_dataclass``, which converts plain data to the annotated field
types.

XML layout::

    @dataclass
    class Order:
        id: int
        tags: list[str]

    <Order><id>7</id><tags><item>a</item><item>b</item></tags></Order>

A field may carry a wire name in its metadata
(``field(metadata={"name": "Date"})``) and a class may name its XML root
with an ``xml_root`` class attribute; both codecs honor them.

Which decoder handles a request body is decided by ``Deserializers``, a
small immutable table from content type to decoder.
"""

from __future__ import annotations

import dataclasses
import json
import types
import typing
import xml.etree.ElementTree as ET
from collections.abc import Mapping
from typing import Any

from wren._internal.types import Deserializer
from wren.errors import BindError, SerializationError

# -- Serialized names --


def field_name(f: dataclasses.Field) -> str:
    """Wire name of dataclass field *f*: ``metadata["name"]`` when set."""
    return f.metadata.get("name", f.name)


def root_name(cls: type) -> str:
    """XML root element for *cls*: its ``xml_root`` class attribute or its name."""
    return getattr(cls, "xml_root", None) or cls.__name__


def _item_types(tp: Any, args: tuple[Any, ...], count: int, where: str) -> list[Any]:
    """Per-item annotations for a sequence of *count* items of type *tp*."""
    if not args:
        return [Any] * count
    if typing.get_origin(tp) is not tuple or (len(args) == 2 and args[1] is Ellipsis):
        return [args[0]] * count
    if len(args) != count:
        msg = f"{where}: expected {len(args)} items, got {count}"
        raise BindError(msg)
    return list(args)


# -- Encoding --


def to_data(value: Any) -> Any:
    """Convert dataclasses (recursively) to plain dicts and lists."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            field_name(f): to_data(getattr(value, f.name)) for f in dataclasses.fields(value)
        }
    if isinstance(value, Mapping):
        return {str(k): to_data(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_data(v) for v in value]
    return value


def to_json(value: Any) -> bytes:
    """Marshal *value* to UTF-8 JSON bytes."""
    try:
        return json.dumps(to_data(value), ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as exc:
        msg = f"Cannot marshal {type(value).__name__} to JSON: {exc}"
        raise SerializationError(msg) from exc


def _xml_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    msg = f"Cannot marshal {type(value).__name__} to XML text"
    raise SerializationError(msg)


def _fill_element(element: ET.Element, value: Any) -> None:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        for f in dataclasses.fields(value):
            child_value = getattr(value, f.name)
            if child_value is not None:
                _fill_element(ET.SubElement(element, field_name(f)), child_value)
    elif isinstance(value, Mapping):
        for key, child_value in value.items():
            if child_value is not None:
                _fill_element(ET.SubElement(element, str(key)), child_value)
    elif isinstance(value, (list, tuple, set, frozenset)):
        for item in value:
            _fill_element(ET.SubElement(element, "item"), item)
    else:
        element.text = _xml_text(value)


def to_xml(value: Any) -> bytes:
    """Marshal a dataclass instance or mapping to XML bytes.

    The root element is named after the dataclass; mappings use
    ``<response>``.
    """
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        root = ET.Element(root_name(type(value)))
    elif isinstance(value, Mapping):
        root = ET.Element("response")
    else:
        msg = f"Cannot marshal {type(value).__name__} to XML: expected a dataclass or mapping"
        raise SerializationError(msg)
    _fill_element(root, value)
    return ET.tostring(root, encoding="utf-8", xml_declaration=False)


# -- Typed building --


def _unwrap_optional(tp: Any) -> tuple[Any, bool]:
    """Return (inner type, allows None) for ``X | None`` annotations."""
    origin = typing.get_origin(tp)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        allows_none = len(args) != len(typing.get_args(tp))
        if len(args) == 1:
            return args[0], allows_none
        return typing.Union[tuple(args)], allows_none  # noqa: UP007
    return tp, False


def _convert(value: Any, tp: Any, where: str) -> Any:
    """Convert *value* to annotation *tp*; raise ``BindError`` on mismatch."""
    if tp is Any or tp is object:
        return value

    inner, allows_none = _unwrap_optional(tp)
    if value is None:
        if allows_none:
            return None
        msg = f"{where}: null is not allowed"
        raise BindError(msg)
    if inner is not tp:
        origin = typing.get_origin(inner)
        if origin is typing.Union or origin is types.UnionType:
            for candidate in typing.get_args(inner):
                try:
                    return _convert(value, candidate, where)
                except BindError:
                    continue
            msg = f"{where}: {value!r} matches none of {inner}"
            raise BindError(msg)
        return _convert(value, inner, where)

    if isinstance(tp, type) and dataclasses.is_dataclass(tp):
        return build_dataclass(tp, value, where=where)

    origin = typing.get_origin(tp)
    args = typing.get_args(tp)

    if tp in (list, tuple, set, frozenset) or origin in (list, tuple, set, frozenset):
        if not isinstance(value, (list, tuple)):
            msg = f"{where}: expected a list, got {type(value).__name__}"
            raise BindError(msg)
        item_types = _item_types(tp, args, len(value), where)
        items = [
            _convert(item, item_type, f"{where}[{i}]")
            for i, (item, item_type) in enumerate(zip(value, item_types, strict=True))
        ]
        container = origin or tp
        return items if container is list else container(items)

    if tp is dict or origin is dict:
        if not isinstance(value, Mapping):
            msg = f"{where}: expected an object, got {type(value).__name__}"
            raise BindError(msg)
        value_type = args[1] if len(args) == 2 else Any
        return {str(k): _convert(v, value_type, f"{where}.{k}") for k, v in value.items()}

    if tp is bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in ("true", "false", "1", "0"):
            return value.lower() in ("true", "1")
        msg = f"{where}: expected a boolean, got {value!r}"
        raise BindError(msg)

    if tp is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str):
            try:
                return int(value)
            except ValueError as exc:
                msg = f"{where}: expected an integer, got {value!r}"
                raise BindError(msg, exc) from exc
        msg = f"{where}: expected an integer, got {value!r}"
        raise BindError(msg)

    if tp is float:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError as exc:
                msg = f"{where}: expected a number, got {value!r}"
                raise BindError(msg, exc) from exc
        msg = f"{where}: expected a number, got {value!r}"
        raise BindError(msg)

    if tp is str:
        if isinstance(value, str):
            return value
        msg = f"{where}: expected a string, got {type(value).__name__}"
        raise BindError(msg)

    if isinstance(tp, type) and isinstance(value, tp):
        return value

    msg = f"{where}: cannot convert {type(value).__name__} to {tp}"
    raise BindError(msg)


def build_dataclass[T](cls: type[T], data: Any, *, where: str | None = None) -> T:
    """Create a *cls* instance from a mapping of plain data.

    Keys absent from *data* fall back to the field default; a missing
    field without a default, or a value that does not convert to the
    annotated type, raises ``BindError``. Unknown keys are ignored.
    """
    where = where or cls.__name__
    if not isinstance(data, Mapping):
        msg = f"{where}: expected an object, got {type(data).__name__}"
        raise BindError(msg)

    try:
        hints = typing.get_type_hints(cls)
    except (NameError, TypeError) as exc:
        msg = f"Cannot resolve field types of {cls.__name__}: {exc}"
        raise BindError(msg, exc) from exc

    kwargs: dict[str, Any] = {}
    for f in dataclasses.fields(cls):  # type: ignore[arg-type]
        if not f.init:
            continue
        key = field_name(f)
        if key in data:
            kwargs[f.name] = _convert(data[key], hints.get(f.name, Any), f"{where}.{key}")
        elif f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
            msg = f"{where}: missing required field {key!r}"
            raise BindError(msg)

    try:
        return cls(**kwargs)
    except (TypeError, ValueError) as exc:
        msg = f"Cannot construct {cls.__name__}: {exc}"
        raise BindError(msg, exc) from exc


# -- Decoding --


def from_json[T](raw: bytes, cls: type[T]) -> T:
    """Decode JSON *raw* into a fresh *cls* instance."""
    try:
        data = json.loads(raw)
    except (ValueError, RecursionError) as exc:
        msg = f"Malformed JSON body: {exc}"
        raise BindError(msg, exc) from exc
    return build_dataclass(cls, data)


def _xml_data(element: ET.Element, tp: Any) -> Any:
    """Turn *element* into plain data shaped by annotation *tp*."""
    inner, _ = _unwrap_optional(tp)
    if isinstance(inner, type) and dataclasses.is_dataclass(inner):
        hints = typing.get_type_hints(inner)
        data: dict[str, Any] = {}
        for f in dataclasses.fields(inner):
            child = element.find(field_name(f))
            if child is not None:
                data[field_name(f)] = _xml_data(child, hints.get(f.name, Any))
        return data

    origin = typing.get_origin(inner)
    if inner in (list, tuple, set, frozenset) or origin in (list, tuple, set, frozenset):
        items = element.findall("item")
        item_types = _item_types(inner, typing.get_args(inner), len(items), element.tag)
        return [_xml_data(item, item_type) for item, item_type in zip(items, item_types)]

    if inner is dict or origin is dict:
        args = typing.get_args(inner)
        value_type = args[1] if len(args) == 2 else Any
        return {child.tag: _xml_data(child, value_type) for child in element}

    return element.text or ""


def from_xml[T](raw: bytes, cls: type[T]) -> T:
    """Decode XML *raw* into a fresh *cls* instance.

    The root element name is not checked; fields are read from its children.
    """
    try:
        root = ET.fromstring(raw)
    except ET.ParseError as exc:
        msg = f"Malformed XML body: {exc}"
        raise BindError(msg, exc) from exc
    try:
        data = _xml_data(root, cls)
    except (NameError, TypeError) as exc:
        msg = f"Cannot resolve field types of {cls.__name__}: {exc}"
        raise BindError(msg, exc) from exc
    return build_dataclass(cls, data)


class Deserializers:
    """Immutable table from content type to body decoder.

    Content types match exactly. Anything unlisted, including a missing
    header, goes to the fallback decoder::

        table = Deserializers.default().with_format("application/yaml", from_yaml)
        decode = table.select(request.content_type)
    """

    __slots__ = ("_by_type", "_fallback")

    def __init__(
        self,
        formats: Mapping[str, Deserializer] | None = None,
        fallback: Deserializer = from_json,
    ) -> None:
        self._by_type: dict[str, Deserializer] = dict(formats or {})
        self._fallback = fallback

    @classmethod
    def default(cls, xml_content_type: str = "application/xml") -> Deserializers:
        """XML for *xml_content_type*, JSON for everything else."""
        return cls({xml_content_type: from_xml}, fallback=from_json)

    def with_format(self, content_type: str, decoder: Deserializer) -> Deserializers:
        """Return a new table that also decodes *content_type* with *decoder*."""
        return Deserializers({**self._by_type, content_type: decoder}, self._fallback)

    def select(self, content_type: str | None) -> Deserializer:
        """Return the decoder for *content_type*."""
        if content_type is None:
            return self._fallback
        return self._by_type.get(content_type, self._fallback)

    def __contains__(self, content_type: object) -> bool:
        return content_type in self._by_type

    def __repr__(self) -> str:
        return f"Deserializers({sorted(self._by_type)!r})"
