"""Shared fixtures for link verifier tests."""

from __future__ import annotations

import pytest

from link_verifier.core import VerifierConfig, make_session

BASE_URL = "http://localhost:3000"


@pytest.fixture
def config():
    return VerifierConfig(base_url=BASE_URL)


@pytest.fixture
def session(config):
    with make_session(config) as s:
        yield s
