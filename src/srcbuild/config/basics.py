"""
string conversion helpers for config values

Values read from ini files are always strings; these map them onto the
types a :obj:`srcbuild.config.hint.ConfigHint` asks for.
"""

__all__ = (
    "str_to_list", "str_to_str", "str_to_bool", "str_to_int", "convert_string",
)

from . import errors


def str_to_list(string: str) -> list[str]:
    """Split on whitespace honoring quoting for new tokens."""
    l = []
    i = 0
    e = len(string)
    # check for stringness because we return something interesting if
    # feeded a sequence of strings
    if not isinstance(string, str):
        raise TypeError(f"expected a string, got {string!r}")
    while i < e:
        if not string[i].isspace():
            if string[i] in ("'", '"'):
                q = i
                i += 1
                res = []
                while i < e and string[i] != string[q]:
                    if string[i] == "\\":
                        i += 1
                    res.append(string[i])
                    i += 1
                if i >= e:
                    raise errors.QuoteInterpretationError(string)
                l.append("".join(res))
            else:
                res = []
                while i < e and not (string[i].isspace() or string[i] in ("'", '"')):
                    if string[i] == "\\":
                        i += 1
                    res.append(string[i])
                    i += 1
                if i < e and string[i] in ("'", '"'):
                    raise errors.QuoteInterpretationError(string)
                l.append("".join(res))
        i += 1
    return l


def str_to_str(string: str) -> str:
    """Yank leading/trailing whitespace and quotation, along with newlines."""
    s = string.strip()
    if len(s) > 1 and s[0] in "\"'" and s[0] == s[-1]:
        s = s[1:-1]
    return s.replace("\n", " ").replace("\t", " ")


def str_to_bool(string: str) -> bool:
    """Convert a string to a boolean."""
    s = str_to_str(string).lower()
    if s in ("no", "false", "0"):
        return False
    if s in ("yes", "true", "1"):
        return True
    raise errors.ConfigurationError(f"{s!r} is not a boolean")


def str_to_int(string: str) -> int:
    """Convert a string to a integer."""
    string = str_to_str(string)
    try:
        return int(string)
    except ValueError:
        raise errors.ConfigurationError(f"{string!r} is not an integer")


_str_converters = {
    "list": str_to_list,
    "str": str_to_str,
    "bool": str_to_bool,
    "int": str_to_int,
}


def convert_string(name: str, value: str, arg_type: str):
    """Convert the string value of setting ``name`` to ``arg_type``."""
    try:
        func = _str_converters[arg_type]
    except KeyError:
        raise errors.ConfigurationError(f"unknown type {arg_type!r} for {name!r}")
    try:
        return func(value)
    except errors.ConfigurationError as e:
        e.stack.append(f"Failed converting argument {name!r} to {arg_type}")
        raise
