"""Test driver.py"""

import random
import threading
from unittest import TestCase, mock

from gcwatch import config
from gcwatch.driver import AllocationPressureDriver
from gcwatch.exceptions import ConfigurationError
from gcwatch.tests.util import FakeClock, ResetConfigurationStateMixin


def small_driver(value_size=1024, max_memory_size=4096, delay=0.001, seed=42, sleep=None):
    """Make a driver with a tiny ceiling and a seeded random source."""
    return AllocationPressureDriver(
        config.DriverConfiguration(
            VALUE_SIZE=value_size,
            MAX_MEMORY_SIZE=max_memory_size,
            DELAY=delay,
        ),
        rng=random.Random(seed),
        sleep=sleep or FakeClock(),
    )


class TestGrowth(TestCase):
    """The growth phase appends one buffer per iteration."""

    def test_buffers_are_zeroed_and_sized(self):
        driver = small_driver()
        driver.step()
        self.assertEqual(driver.values, [bytearray(1024)])
        self.assertEqual(len(driver.values[0]), 1024)

    def test_each_iteration_grows_by_one(self):
        driver = small_driver(value_size=100, max_memory_size=1000)
        while driver.memory_size <= 1000:
            before_len, before_size = len(driver.values), driver.memory_size
            self.assertIsNone(driver.step())
            self.assertEqual(len(driver.values), before_len + 1)
            self.assertEqual(driver.memory_size, before_size + 100)

    def test_four_iterations(self):
        driver = small_driver()
        for _ in range(4):
            self.assertIsNone(driver.step())
        self.assertEqual(len(driver.values), 4)
        self.assertEqual(driver.memory_size, 4096)
        self.assertFalse(driver.plateau)

    def test_ceiling_is_only_crossed_when_exceeded(self):
        # 4096 is not more than 4096, so the fifth buffer is still appended.
        driver = small_driver()
        for _ in range(5):
            self.assertIsNone(driver.step())
        self.assertEqual(len(driver.values), 5)
        self.assertEqual(driver.memory_size, 5120)
        self.assertTrue(driver.plateau)

    def test_zero_ceiling_retains_one_buffer(self):
        driver = small_driver(max_memory_size=0)
        self.assertIsNone(driver.step())
        self.assertEqual(driver.step(), 0)
        self.assertEqual(len(driver.values), 1)


class TestPlateau(TestCase):
    """Once the ceiling is exceeded, buffers are replaced."""

    def test_sixth_iteration_replaces(self):
        driver = small_driver()
        for _ in range(5):
            driver.step()
        old_values = list(driver.values)
        index = driver.step()
        self.assertIn(index, range(5))
        self.assertEqual(len(driver.values), 5)
        self.assertEqual(driver.memory_size, 5120)
        self.assertIsNot(driver.values[index], old_values[index])
        for other in set(range(5)) - {index}:
            self.assertIs(driver.values[other], old_values[other])

    def test_length_never_changes_again(self):
        driver = small_driver(value_size=10, max_memory_size=95)
        while not driver.plateau:
            driver.step()
        length = len(driver.values)
        for _ in range(500):
            driver.step()
            self.assertEqual(len(driver.values), length)
            self.assertEqual(driver.memory_size, 10 * length)

    def test_every_index_gets_replaced(self):
        driver = small_driver(value_size=1, max_memory_size=15)
        while not driver.plateau:
            driver.step()
        replaced = {driver.step() for _ in range(2000)}
        self.assertEqual(replaced, set(range(len(driver.values))))

    def test_same_seed_same_replacements(self):
        def replacements(seed):
            driver = small_driver(seed=seed)
            return [driver.step() for _ in range(100)]

        self.assertEqual(replacements(7), replacements(7))
        self.assertNotEqual(replacements(7), replacements(8))

    @mock.patch("gcwatch.driver.log")
    def test_plateau_is_logged_once(self, log):
        driver = small_driver()
        for _ in range(50):
            driver.step()
        self.assertEqual(log.info.call_count, 1)


class TestRun(TestCase):
    """The loop runs until told to stop, pacing itself."""

    def test_run_stops_on_event(self):
        stop = threading.Event()
        clock = FakeClock(stop_event=stop, stop_after=10)
        driver = small_driver(sleep=clock, delay=0.5)
        iterations = driver.run(stop_event=stop)
        self.assertEqual(iterations, 10)
        self.assertEqual(clock.delays, [0.5] * 10)
        self.assertEqual(len(driver.values), 5)

    def test_run_with_event_already_set(self):
        stop = threading.Event()
        stop.set()
        driver = small_driver()
        self.assertEqual(driver.run(stop_event=stop), 0)
        self.assertEqual(driver.values, [])

    def test_memory_error_propagates(self):
        driver = small_driver(sleep=mock.Mock(side_effect=[None, MemoryError]))
        with self.assertRaises(MemoryError):
            driver.run()
        self.assertEqual(len(driver.values), 2)


class TestConfiguration(ResetConfigurationStateMixin, TestCase):
    """How the driver picks up its configuration."""

    def test_defaults(self):
        driver = AllocationPressureDriver()
        self.assertEqual(driver.configuration, config.DEFAULT_CONFIGURATION)
        self.assertEqual(driver.configuration.VALUE_SIZE, 102400)
        self.assertEqual(driver.configuration.MAX_MEMORY_SIZE, 966367641)
        self.assertEqual(driver.configuration.DELAY, 0.001)

    def test_manual_configuration(self):
        config.configure(VALUE_SIZE=16, MAX_MEMORY_SIZE=64)
        driver = AllocationPressureDriver()
        self.assertEqual(driver.configuration.VALUE_SIZE, 16)
        self.assertEqual(driver.configuration.DELAY, 0.001)

    def test_zero_value_size_is_rejected(self):
        with self.assertRaises(ConfigurationError):
            small_driver(value_size=0)
