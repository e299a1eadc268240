import collections.abc
from typing import Iterable, Mapping, Sequence, Tuple, Union
from urllib.parse import quote_plus

from typing_extensions import TypeAlias

FieldValue: TypeAlias = Union[None, str, bytes, int, float]
FormFields: TypeAlias = Union[
    Mapping[str, Union[FieldValue, Sequence[FieldValue]]],
    Iterable[Tuple[str, FieldValue]],
]

CONTENT_TYPE = "application/x-www-form-urlencoded"


def encode_form(fields: FormFields) -> bytes:
    """Serialize form fields to application/x-www-form-urlencoded.

    Fields are given either as a mapping, where a value may be a list to
    repeat the key, or as an iterable of (key, value) pairs. Terms built from
    a mapping are sorted so the output does not depend on insertion order;
    pairs are kept in the order given. None values are sent as empty
    strings.
    """
    if isinstance(fields, collections.abc.Mapping):
        terms = sorted(
            _term(key, value)
            for key, values in fields.items()
            for value in _values(values)
        )
    else:
        terms = [_term(key, value) for key, value in fields]
    return "&".join(terms).encode("ascii")


def _values(values) -> Sequence[FieldValue]:
    if isinstance(values, (list, tuple)):
        return values
    return [values]


def _term(key: str, value: FieldValue) -> str:
    return f"{_escape(key)}={_escape(value)}"


def _escape(value: FieldValue) -> str:
    if value is None:
        return ""
    if not isinstance(value, (str, bytes)):
        value = str(value)
    return quote_plus(value, safe="")
