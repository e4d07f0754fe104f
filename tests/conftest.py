"""
Pytest configuration and fixtures for deepstream-async tests.

This module provides fixtures for:
- An in-memory store client with sample records and lists
- DeepstreamAsync facades bound to that store
- Isolation of the global configuration
- Loading join scenarios from YAML files
"""

import os
from pathlib import Path
from typing import Any

import pytest
import yaml

from tests.mock_store import MockStore


SCENARIO_DIR = Path(__file__).parent / "scenarios"


# ============================================================================
# Unit Test Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def isolated_config():
    """Restore the global configuration after each test."""
    from deepstream_async import config

    saved = dict(config._global_config)
    yield
    config._global_config.clear()
    config._global_config.update(saved)


@pytest.fixture
def store() -> MockStore:
    """Create a store with a list of todos that reference users."""
    return MockStore(
        records={
            "users/ada": {"name": "Ada", "team": "teams/core"},
            "users/bob": {"name": "Bob", "team": "teams/core"},
            "teams/core": {"title": "Core"},
            "todos/1": {"title": "write tests", "owner": "users/ada", "meta": {"team": "teams/core"}},
            "todos/2": {"title": "ship it", "owner": "users/bob", "meta": {"team": "teams/core"}},
            "todos/3": {"title": "celebrate", "owner": "users/ada", "meta": {"team": "teams/core"}},
        },
        lists={"todos": ["todos/1", "todos/2", "todos/3"]},
    )


@pytest.fixture
def client_config():
    """Create a test ClientConfig."""
    from deepstream_async import ClientConfig, PathMode

    return ClientConfig(
        url="ws://localhost:6020",
        path_mode=PathMode.PRESENT,
        progress_prefix="progress_event",
    )


@pytest.fixture
def ds(store: MockStore, client_config):
    """Create a DeepstreamAsync facade over the mock store."""
    from deepstream_async import DeepstreamAsync

    return DeepstreamAsync(store, client_config)


@pytest.fixture
def records(store: MockStore):
    """Create a RecordBridge over the mock store."""
    from deepstream_async import RecordBridge

    return RecordBridge(store)


# ============================================================================
# Scenario Fixtures
# ============================================================================

def load_scenarios(scenario_dir: Path) -> list[dict[str, Any]]:
    """Load all join scenarios from YAML files."""
    scenarios = []
    if not scenario_dir.exists():
        return scenarios

    for scenario_file in sorted(scenario_dir.glob("*.yaml")):
        with open(scenario_file) as f:
            spec = yaml.safe_load(f)
            if spec and "tests" in spec:
                for test in spec["tests"]:
                    test["_file"] = scenario_file.name
                    test["_category"] = spec.get("name", scenario_file.stem)
                    scenarios.append(test)
    return scenarios


def pytest_generate_tests(metafunc):
    """Generate test cases from join scenarios."""
    if "join_scenario" in metafunc.fixturenames:
        scenario_dir = Path(os.environ.get("TEST_SCENARIO_DIR", SCENARIO_DIR))
        tests = load_scenarios(scenario_dir)
        if tests:
            metafunc.parametrize(
                "join_scenario",
                tests,
                ids=[f"{t.get('_category', 'test')}::{t['name']}" for t in tests]
            )
        else:
            metafunc.parametrize("join_scenario", [{}], ids=["no_scenarios_found"])
