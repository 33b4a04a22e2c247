"""Shared test fixtures for ensres tests."""

from __future__ import annotations

import pytest

from ensres.sdk.client import EnsClient
from tests.fakes import CONTRACTS, TEST_CHAIN_ID, FakeChain


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path, monkeypatch):
    """Keep every test away from the user's ENSRES_* settings and config.toml."""
    for var in ("ENSRES_RPC_URL", "ENSRES_CHAIN_ID", "ENSRES_MANAGED_TLD"):
        monkeypatch.delenv(var, raising=False)
    home = tmp_path / "ensres_home"
    home.mkdir()
    monkeypatch.setenv("ENSRES_HOME", str(home))
    return home


@pytest.fixture()
def chain() -> FakeChain:
    return FakeChain()


@pytest.fixture()
def client(chain: FakeChain) -> EnsClient:
    """EnsClient on the test chain with CCIP-read disabled."""
    return EnsClient(chain, chain_id=TEST_CHAIN_ID, contracts=CONTRACTS, ccip_read=False)
