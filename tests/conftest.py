"""Shared fixtures for membuddy tests."""

import pytest

from tests.harness import StubMeter


@pytest.fixture
def stub_meter():
    return StubMeter()


@pytest.fixture
def deep_graph():
    return {"a": {"b": {"c": {"d": "deep"}}}}
