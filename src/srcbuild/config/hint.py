"""Config introspection support."""


__all__ = ("ConfigHint",)

import typing


class ConfigHint:
    """Hint describing how string config values map onto constructor arguments."""

    types: dict[str, str]
    required: tuple[str, ...]
    typename: typing.Optional[str]
    allow_unknowns: bool

    __slots__ = (
        "types",
        "required",
        "typename",
        "allow_unknowns",
    )

    def __init__(
        self,
        types: typing.Optional[dict[str, str]] = None,
        required: typing.Optional[typing.Sequence[str]] = None,
        typename: typing.Optional[str] = None,
        allow_unknowns: bool = False,
    ) -> None:
        self.types = types or {}
        self.required = tuple(required or [])
        self.typename = typename
        self.allow_unknowns = allow_unknowns
