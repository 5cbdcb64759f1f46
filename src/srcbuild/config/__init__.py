"""
build settings shared by every package pipeline in a process

A single :obj:`BuildConfig` is created at startup, either directly or via
:func:`load_config`, and made available through :func:`default_config`.
"""

__all__ = (
    "BuildConfig", "load_config", "instantiate", "default_config", "set_default_config",
)

import os

from .. import const
from ..log import logger
from . import basics, cparser, errors
from .hint import ConfigHint


class BuildConfig:
    """Process-wide build settings.

    :ivar do_update: update existing source trees on import
    :ivar verbose: report skipped steps through package observers
    :ivar always_regenerate: force code generators to always re-run
    :ivar parallel_build_level: number of parallel jobs handed to build tools
    :ivar tools: mapping of tool name to the command used to run it
    """

    srcbuild_config_type = ConfigHint(
        types={
            "do_update": "bool",
            "verbose": "bool",
            "always_regenerate": "bool",
            "parallel_build_level": "int",
        },
        typename="build",
    )

    def __init__(self, do_update=True, verbose=False, always_regenerate=True,
                 parallel_build_level=None, tools=None):
        self.do_update = do_update
        self.verbose = verbose
        self.always_regenerate = always_regenerate
        if parallel_build_level is None:
            parallel_build_level = os.cpu_count() or 1
        self.parallel_build_level = parallel_build_level
        self.tools = dict(tools) if tools else {}

    def tool(self, name):
        """Return the command to use for the tool ``name``.

        Explicit settings win over the ``SRCBUILD_TOOL_<NAME>`` environment
        variable, which wins over the bare tool name.
        """
        try:
            return self.tools[name]
        except KeyError:
            pass
        return os.environ.get(f"{const.TOOL_ENV_PREFIX}{name.upper()}", name)

    @classmethod
    def from_sections(cls, sections):
        """Create a config from a mapping of ini section name to raw values."""
        tools = {k: basics.str_to_str(v) for k, v in _section(sections, "tools").items()}
        return instantiate(cls, _section(sections, cls.srcbuild_config_type.typename), tools=tools)

    def __repr__(self):
        return (
            f"<{self.__class__.__name__} do_update={self.do_update!r} "
            f"verbose={self.verbose!r} always_regenerate={self.always_regenerate!r} "
            f"parallel_build_level={self.parallel_build_level!r} @{id(self):#8x}>"
        )


def load_config(path):
    """Load a :obj:`BuildConfig` from the ini file at ``path``."""
    logger.debug("loading build config from %r", path)
    with open(path) as f:
        sections = cparser.config_from_file(f)
    return BuildConfig.from_sections(sections)


def instantiate(cls, section, **extra):
    """Construct ``cls`` from a dict of raw string values.

    Values are converted according to ``cls.srcbuild_config_type``; ``extra``
    is passed through unconverted.
    """
    hint = cls.srcbuild_config_type
    kwargs = {}
    for key, value in section.items():
        try:
            arg_type = hint.types[key]
        except KeyError:
            if hint.allow_unknowns:
                kwargs[key] = value
                continue
            raise errors.ConfigurationError(
                f"unknown setting {key!r} for {hint.typename or cls.__name__!r}")
        kwargs[key] = basics.convert_string(key, value, arg_type)
    missing = [x for x in hint.required if x not in kwargs]
    if missing:
        raise errors.ConfigurationError(
            f"{hint.typename or cls.__name__!r} is missing required settings: "
            f"{', '.join(missing)}")
    kwargs.update(extra)
    return cls(**kwargs)


def _section(sections, name):
    if name in sections:
        return sections[name]
    return {}


_default = None


def default_config():
    """Return the shared config, creating a default one on first use."""
    global _default
    if _default is None:
        _default = BuildConfig()
    return _default


def set_default_config(config):
    """Replace the shared config; returns the previous one."""
    global _default
    previous, _default = _default, config
    return previous
