"""Shared pytest fixtures for ChainScopeWeb tests."""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

import pytest

# Ensure the project root is importable
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

# Override config directory so tests don't touch a real settings file.
os.environ["CHAINSCOPE_CONFIG_DIR"] = tempfile.mkdtemp(prefix="chainscope_test_cfg_")
os.environ.pop("CHAINSCOPE_API_URL", None)


@pytest.fixture
def network_result():
    """Wallet network response (connected wallets, no edges)."""
    return {
        "address": "1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa",
        "totalTransactions": 42,
        "connectedWallets": [
            {"address": "bc1qxy2kgdygjrsqtzq2n0yrf2493p83kkfjhx0wlh", "degree": 9, "transactionCount": 14},
            {"address": "3J98t1WpEZ73CNmQviecrnyiWrnqRhWNLy", "degree": 2},
            {"wallet": "1BoatSLRHtKNngkdXEeobR76b53LETtpyT", "transactionCount": 4},
        ],
    }


@pytest.fixture
def chains_result():
    """Peel-chain response."""
    return {
        "chains": [
            {"sourceWallet": "s1", "mainRecipient": "r1", "totalAmount": 500},
            {"sourceWallet": "s1", "changeAddress": "c2", "totalAmount": 1234.5},
            {"mainRecipient": "r3"},
        ],
    }


@pytest.fixture
def path_result():
    """Shortest-path response with address-bearing steps."""
    return {
        "fromAddress": "w1",
        "toAddress": "w4",
        "connectionFound": True,
        "path": [
            {"address": "w1", "stepNumber": 0, "nodeType": "WALLET"},
            {"address": "w2", "stepNumber": 1, "amount": 1500},
            "w3",
            {"address": "w4", "stepNumber": 3},
        ],
    }


@pytest.fixture
def centrality_result():
    """Betweenness centrality response (bare list)."""
    return [
        {"wallet": "hub1", "degree": 12, "centrality": 0.81},
        {"address": "hub2", "transactionCount": 3},
        {"centrality": 0.02},
    ]
