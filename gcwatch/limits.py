"""
Configurable runtime tuning for a launched driver process
"""

import gc
import logging
import os
import resource

from .exceptions import ConfigurationError

log = logging.getLogger("gcwatch")

# Environment variables understood by the child process.
GC_THRESHOLDS_ENV = "GCWATCH_GC_THRESHOLDS"
OPTIONS_ENV = "GCWATCH_OPTIONS"


DEFAULT_LIMITS = {
    # Real time, in seconds, before the launched process is killed.  0 means
    # let it run until something else kills it.
    "REALTIME": 0,
    # Total process virtual memory, in bytes, defaulting to 2 GiB so the
    # default ceiling fits with room for the interpreter.
    "VMEM": 2 * 1024 * 1024 * 1024,
    # Memory allocator, passed through as PYTHONMALLOC.  None keeps the
    # interpreter default.
    "MALLOC": None,
    # Arguments for gc.set_threshold in the child.  None keeps the defaults.
    "GC_THRESHOLDS": None,
}

# Configured limits.
# Modified by calling `set_limit`.
LIMITS = DEFAULT_LIMITS.copy()


def set_limit(limit_name, value):
    """
    Set a runtime limit for launched drivers.

    `limit_name` is a string, the name of the limit to set. `value` is the
    value to use for that limit.

    These limits are available:

        * `"REALTIME"`: seconds the launched process may run in real time.
            The default is 0 (no limit).

        * `"VMEM"`: the total virtual memory available to the process, in
            bytes.  The default is 2 GiB.  0 disables the limit.

        * `"MALLOC"`: the allocator name for `PYTHONMALLOC`, such as
            `"pymalloc"` or `"malloc"`.  The default is None.

        * `"GC_THRESHOLDS"`: a tuple of up to three ints for
            `gc.set_threshold`.  The default is None.

    Limits are process-wide, and will affect all future launches.

    """
    if limit_name not in DEFAULT_LIMITS:
        raise ConfigurationError("Unknown limit: {!r}".format(limit_name))
    LIMITS[limit_name] = value


def create_rlimits():
    """
    Create a list of resource limits for a launched driver.
    """
    rlimits = []

    vmem = LIMITS["VMEM"]
    if vmem:
        rlimits.append((resource.RLIMIT_AS, (vmem, vmem)))

    return rlimits


def create_environment(options=None, base=None):
    """
    Build the environment for a launched driver.

    `options` is the GC watch option string (`"port=<n>"`), or None to leave
    the listener off.  `base` defaults to a copy of `os.environ`.
    """
    env = dict(os.environ if base is None else base)
    if LIMITS["MALLOC"]:
        env["PYTHONMALLOC"] = LIMITS["MALLOC"]
    thresholds = LIMITS["GC_THRESHOLDS"]
    if thresholds:
        env[GC_THRESHOLDS_ENV] = ",".join(str(t) for t in thresholds)
    if options:
        env[OPTIONS_ENV] = options
    return env


def apply_gc_thresholds(environ=None):
    """
    Apply collector thresholds given through the environment, if any.

    Returns the thresholds applied, or None.
    """
    environ = os.environ if environ is None else environ
    value = environ.get(GC_THRESHOLDS_ENV)
    if not value:
        return None
    try:
        thresholds = tuple(int(part) for part in value.split(","))
    except ValueError as exc:
        raise ConfigurationError(
            "Bad {}: {!r}".format(GC_THRESHOLDS_ENV, value)
        ) from exc
    if not 1 <= len(thresholds) <= 3 or min(thresholds) < 0:
        raise ConfigurationError(
            "{} takes one to three non-negative ints, got {!r}".format(GC_THRESHOLDS_ENV, value)
        )
    gc.set_threshold(*thresholds)
    log.info("Set GC thresholds to %r", thresholds)
    return thresholds
