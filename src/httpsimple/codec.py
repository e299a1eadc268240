import dataclasses
import json
from typing import Any, Union

from httpsimple.error import JSONError


class JSONCodec:
    """Encodes values to UTF-8 JSON and decodes them back.

    Object keys are sorted so that the same value always produces the same
    bytes. Dataclass instances are encoded as objects, and any other object
    is encoded through its to_json() method when it has one.
    """

    __slots__ = ("sort_keys", "indent")

    def __init__(self, sort_keys: bool = True, indent: Union[None, int, str] = None):
        self.sort_keys = sort_keys
        self.indent = indent

    def encode(self, value: Any) -> bytes:
        try:
            text = json.dumps(
                value,
                default=_to_json,
                ensure_ascii=False,
                sort_keys=self.sort_keys,
                indent=self.indent,
                separators=(",", ":") if self.indent is None else None,
                allow_nan=False,
            )
        except (TypeError, ValueError) as e:
            raise JSONError(f"cannot encode value to JSON: {e}") from e
        return text.encode("utf-8")

    def decode(self, data: Union[bytes, str]) -> Any:
        try:
            return json.loads(data)
        except (UnicodeDecodeError, ValueError) as e:
            raise JSONError(f"cannot decode JSON: {e}") from e


def _to_json(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    to_json = getattr(value, "to_json", None)
    if callable(to_json):
        return to_json()
    raise TypeError(
        f"Object of type {type(value).__name__} is not JSON serializable"
    )
