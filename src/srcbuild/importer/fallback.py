"""
recovery handlers consulted when an import fails

A handler is any callable taking ``(package, importer)`` and returning
either a substitute :obj:`srcbuild.importer.base.Importer` (a mirror, an
archive, a cached copy...) or None.  Handlers are tried most recently
registered first and the first substitute wins.

Handlers are responsible for not handing back importers that recurse into
themselves forever; nothing here guards against it.
"""

__all__ = ("FallbackRegistry", "default_registry")

from ..log import logger


class FallbackRegistry:

    def __init__(self, handlers=()):
        self._handlers = []
        for handler in handlers:
            self.register(handler)

    def register(self, handler):
        """Register ``handler``; it will be tried before all existing ones.

        Returns ``handler`` so this can be used as a decorator.
        """
        if not callable(handler):
            raise TypeError(f"fallback handler must be callable: {handler!r}")
        self._handlers.insert(0, handler)
        return handler

    def __iter__(self):
        return iter(tuple(self._handlers))

    def __len__(self):
        return len(self._handlers)

    def find_substitute(self, package, importer):
        """Return the first substitute importer offered, or None."""
        # imported here to avoid a cycle; base needs the registry
        from .base import Importer
        for handler in self:
            logger.debug("%s: trying fallback handler %r", package, handler)
            substitute = handler(package, importer)
            if isinstance(substitute, Importer):
                logger.debug("%s: fallback handler %r offered %r", package, handler, substitute)
                return substitute
        return None


_default = None


def default_registry():
    """Return the process-wide registry, populated at startup."""
    global _default
    if _default is None:
        _default = FallbackRegistry()
    return _default
