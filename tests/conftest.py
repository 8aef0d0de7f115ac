"""Shared test fixtures."""

import sys

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from encapsulate import (
    CompositionSettings,
    SafekeepingStore,
    SlotKeyAllocator,
    behavior,
)


@pytest.fixture
def store():
    """Fresh, thread-safe SafekeepingStore."""
    return SafekeepingStore(thread_safe=True)


@pytest.fixture
def allocator():
    """Fresh SlotKeyAllocator."""
    return SlotKeyAllocator()


@pytest.fixture
def quiet_settings():
    """Settings with shadowing warnings turned off."""
    return CompositionSettings(warn_on_shadow=False)


@behavior
class FixtureHasName:
    def name(self):
        return self._name

    def set_name(self, name):
        self._name = name
        return self


@behavior
class FixtureHasCareer:
    def career(self):
        return self._career

    def set_career(self, career):
        self._career = career
        return self


@behavior
class FixtureIsSelfDescribing:
    def description(self):
        return self.name() + " is a " + self.career()


@pytest.fixture
def has_name():
    return FixtureHasName


@pytest.fixture
def has_career():
    return FixtureHasCareer


@pytest.fixture
def is_self_describing():
    return FixtureIsSelfDescribing
