"""
Configuration for the allocation-pressure driver.
"""

from collections import namedtuple

from .exceptions import ConfigurationError


# Sizes and pacing for `AllocationPressureDriver`.
DriverConfiguration = namedtuple('DriverConfiguration', [
    # int: bytes per retained buffer.
    'VALUE_SIZE',
    # int: once the live-memory counter exceeds this many bytes, buffers are
    # replaced instead of appended.
    'MAX_MEMORY_SIZE',
    # float: seconds to sleep after every iteration.
    'DELAY',
])


DEFAULT_CONFIGURATION = DriverConfiguration(
    VALUE_SIZE=100 * 1024,
    MAX_MEMORY_SIZE=int(0.9 * 1024 * 1024 * 1024),
    DELAY=0.001,
)

# Global variable for manually configuring the driver.
# None indicates no manual configuration.
MANUAL_CONFIGURATION = None


def configure(**kwargs):
    """
    Manually set driver configuration options.

    Keyword names are the fields of `DriverConfiguration`.  Omitted options
    fall back to `DEFAULT_CONFIGURATION`.  Raises `ConfigurationError` if the
    result is not usable.
    """
    global MANUAL_CONFIGURATION  # pylint: disable=global-statement
    try:
        configuration = DEFAULT_CONFIGURATION._replace(**kwargs)
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc
    MANUAL_CONFIGURATION = validate(configuration)


def deconfigure():
    """
    Remove manual driver configuration.
    """
    global MANUAL_CONFIGURATION  # pylint: disable=global-statement
    MANUAL_CONFIGURATION = None


def get_configuration():
    """
    Get the manual configuration if there is one, else the defaults.
    """
    if MANUAL_CONFIGURATION is not None:
        return MANUAL_CONFIGURATION
    return DEFAULT_CONFIGURATION


def validate(configuration):
    """
    Check `configuration` and return it unchanged.

    Zero-size buffers would make the growth phase endless without ever
    allocating anything, so `VALUE_SIZE` must be positive.  A negative
    `MAX_MEMORY_SIZE` would ask for a replacement before anything was
    retained.
    """
    for name in ('VALUE_SIZE', 'MAX_MEMORY_SIZE'):
        value = getattr(configuration, name)
        if not isinstance(value, int) or isinstance(value, bool):
            raise ConfigurationError("{} must be an int, got {!r}".format(name, value))
    if not isinstance(configuration.DELAY, (int, float)) or isinstance(configuration.DELAY, bool):
        raise ConfigurationError("DELAY must be a number, got {!r}".format(configuration.DELAY))
    if configuration.VALUE_SIZE <= 0:
        raise ConfigurationError(
            "VALUE_SIZE must be positive, got {!r}".format(configuration.VALUE_SIZE)
        )
    if configuration.MAX_MEMORY_SIZE < 0:
        raise ConfigurationError(
            "MAX_MEMORY_SIZE can't be negative, got {!r}".format(configuration.MAX_MEMORY_SIZE)
        )
    if configuration.DELAY < 0:
        raise ConfigurationError(
            "DELAY can't be negative, got {!r}".format(configuration.DELAY)
        )
    return configuration
