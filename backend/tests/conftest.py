"""Shared fixtures for estimator and API tests."""

import pytest

from boxquote.services.costing import CostInputs


@pytest.fixture
def lid_bottom_inputs() -> CostInputs:
    """250x80x160 lid-and-base box, 100 pcs, designer paper, logos only."""
    return CostInputs(
        box_type="lidBottom",
        width_mm=250,
        height_mm=80,
        depth_mm=160,
        quantity=100,
        base_board="chip_1_5",
        wrap_paper="designer_120",
        print_mode="logosOnly",
    )


@pytest.fixture
def client(tmp_path, monkeypatch):
    """API client backed by a throwaway SQLite database."""
    from fastapi.testclient import TestClient

    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'quotes.db'}")
    from boxquote.main import app

    with TestClient(app) as c:
        yield c
