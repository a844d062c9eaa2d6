"""
Shared utilities for gcwatch tests.
"""

from .. import config, limits


class ResetConfigurationStateMixin:
    """
    The config and limits modules have global state.

    Use this mixin to reset them to their initial state before running a test
    function, and then restore the existing state once the test is complete.
    """

    def setUp(self):
        super().setUp()
        # pylint: disable=invalid-name
        self._MANUAL_CONFIGURATION = config.MANUAL_CONFIGURATION
        self._LIMITS = limits.LIMITS
        config.MANUAL_CONFIGURATION = None
        limits.LIMITS = limits.DEFAULT_LIMITS.copy()

    def tearDown(self):
        config.MANUAL_CONFIGURATION = self._MANUAL_CONFIGURATION
        limits.LIMITS = self._LIMITS
        super().tearDown()


class FakeClock:
    """
    Stands in for `time.sleep`, recording the requested delays.

    Sets `stop_event` once `stop_after` sleeps have happened, if both are given.
    """
    def __init__(self, stop_event=None, stop_after=None):
        self.delays = []
        self.stop_event = stop_event
        self.stop_after = stop_after

    def __call__(self, seconds):
        self.delays.append(seconds)
        if self.stop_event is not None and len(self.delays) >= self.stop_after:
            self.stop_event.set()
