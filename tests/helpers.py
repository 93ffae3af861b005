"""Shared fixtures for the test suite."""
import datetime
import os
import shutil
import tempfile
import unittest

import pytz

from wishwatch.storage import KeyValueBackend

T0 = datetime.datetime(2024, 5, 1, 12, 0, 0, tzinfo=pytz.UTC)


class TmpDirMixin(unittest.TestCase):
    """Creates a fresh temp directory for each test."""

    def setUp(self):
        super().setUp()
        self.tmp = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmp, ignore_errors=True)
        super().tearDown()

    def _path(self, name: str) -> str:
        return os.path.join(self.tmp, name)


class FakeClock:
    """Returns T0, T0+1s, T0+2s, ... on each call."""

    def __init__(self, start: datetime.datetime = T0):
        self.now = start

    def __call__(self) -> datetime.datetime:
        value = self.now
        self.now = self.now + datetime.timedelta(seconds=1)
        return value


class BrokenBackend(KeyValueBackend):
    """Every call fails like an unreachable disk."""

    def __init__(self):
        self.calls = 0

    def get_string_list(self, key):
        self.calls += 1
        raise OSError("disk unavailable")

    def set_string_list(self, key, values):
        self.calls += 1
        raise OSError("disk unavailable")


class FlakyBackend(KeyValueBackend):
    """Fails the first *failures* writes, then stores in memory."""

    def __init__(self, failures: int = 1):
        self.failures = failures
        self.data = {}
        self.write_attempts = 0

    def get_string_list(self, key):
        values = self.data.get(key)
        return None if values is None else list(values)

    def set_string_list(self, key, values):
        self.write_attempts += 1
        if self.write_attempts <= self.failures:
            raise OSError("database is locked")
        self.data[key] = list(values)
