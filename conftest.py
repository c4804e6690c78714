"""Configures pytest further."""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import random

import pytest

from rsakeypair import KeyMaterial

# Textbook pair: p = 61, q = 53, totient = 3120.
TOY_PUBLIC = KeyMaterial(17, 3233)
TOY_PRIVATE = KeyMaterial(2753, 3233)


def pytest_addoption(parser):
    parser.addoption("--skip-slow", action="store_true", default=False, help="skip slower tests")
    parser.addoption("--run-extreme", action="store_true", default=False, help="run extreme value extremely slow tests")


def pytest_collection_modifyitems(config, items):
    skipdict = {}
    if config.getoption("--skip-slow"):
        skipdict["slow"] = pytest.mark.skip(reason="Slow test: needs no --skip-slow option")
    if not config.getoption("--run-extreme"):
        skipdict["extreme"] = pytest.mark.skip(reason="Extreme test: needs --run-extreme option")
    if not skipdict:
        return
    for item in items:
        for k, v in skipdict.items():
            if k in item.keywords:
                item.add_marker(v)


@pytest.fixture
def toy_pair() -> tuple[KeyMaterial, KeyMaterial]:
    return TOY_PUBLIC, TOY_PRIVATE


@pytest.fixture
def rng() -> random.Random:
    """Deterministic generator so failures can be replayed."""
    return random.Random(17092025)
