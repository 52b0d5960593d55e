"""Shared fixtures: a throwaway demo site under ``tmp_path``."""

import pytest

from lighthouse.config import AppConfig
from lighthouse.demo import create_app


@pytest.fixture
def demo_config(tmp_path) -> AppConfig:
    return AppConfig(
        secret_key="test-secret",
        testing=True,
        database=f"sqlite:///{tmp_path / 'demo.db'}",
        rate_limit_file=tmp_path / "rate_limits.json",
    )


@pytest.fixture
def demo_app(demo_config):
    return create_app(demo_config)
