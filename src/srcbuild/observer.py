"""
progress sinks handed to packages

Packages report user-visible progress ("updating foo", "patching foo")
through one of these rather than through the logger.
"""

__all__ = (
    "null_output", "file_handle_output", "phase_observer", "decorate_build_method",
)

from snakeoil import klass
from snakeoil.currying import pre_curry


def _convert(msg, args=(), kwds={}):
    # Note for interpolation, ValueError can be thrown by '%2(s'
    # TypeError by "%i" % "2", and KeyError via what you would expect.
    if args:
        if kwds:
            raise TypeError(
                "both position and optional args cannot be "
                "supplied: given msg(%r), args(%r), kwds(%r)"
                % (msg, args, kwds))
        try:
            return msg % args
        except (ValueError, TypeError) as e:
            raise TypeError(
                f"observer interpolation error: {e}, msg={msg!r}, args={args!r}")
    elif kwds:
        try:
            return msg % kwds
        except (KeyError, TypeError, ValueError) as e:
            raise TypeError(
                f"observer interpolation error: {e}, msg={msg!r}, kwds={kwds!r}")
    return msg


class null_output:

    def warn(self, msg, *args, **kwds):
        pass

    def error(self, msg, *args, **kwds):
        pass

    def info(self, msg, *args, **kwds):
        pass

    def debug(self, msg, *args, **kwds):
        pass

    def write(self, msg, *args, **kwds):
        pass

    def flush(self):
        pass


class file_handle_output(null_output):

    def __init__(self, out):
        self._out = out

    def debug(self, msg, *args, **kwds):
        self._out.write(f"debug: {_convert(msg, args, kwds)}\n")

    def error(self, msg, *args, **kwds):
        self._out.write(f"error: {_convert(msg, args, kwds)}\n")

    def info(self, msg, *args, **kwds):
        self._out.write(f"info: {_convert(msg, args, kwds)}\n")

    def warn(self, msg, *args, **kwds):
        self._out.write(f"warning: {_convert(msg, args, kwds)}\n")

    def write(self, msg, *args, **kwds):
        self._out.write(_convert(msg, args, kwds))

    def flush(self):
        self._out.flush()


class phase_observer:

    def __init__(self, output, debug=False):
        self._output = output
        self._debug = debug

    def phase_start(self, phase):
        if self._debug:
            self._output.write(f"starting {phase}\n")

    def debug(self, msg, *args, **kwds):
        if self._debug:
            self._output.debug(msg, *args, **kwds)

    info = klass.alias_attr("_output.info")
    warn = klass.alias_attr("_output.warn")
    error = klass.alias_attr("_output.error")
    write = klass.alias_attr("_output.write")
    flush = klass.alias_attr("_output.flush")

    def phase_end(self, phase, status):
        if self._debug:
            self._output.write(f"finished {phase}: {status}\n")


def wrap_build_method(phase, method, self, *args, **kwds):
    observer = getattr(self, 'observer', None)
    if observer is None or not hasattr(observer, 'phase_start'):
        return method(self, *args, **kwds)
    observer.phase_start(phase)
    ret = False
    try:
        ret = method(self, *args, **kwds)
    finally:
        observer.phase_end(phase, ret)
    return ret


def decorate_build_method(phase):
    """Bracket a package method with its observer's phase_start/phase_end."""
    def f(func):
        return pre_curry(wrap_build_method, phase, func)
    return f
