import matplotlib

matplotlib.use("Agg")

import pytest


@pytest.fixture
def returns_a():
    return [0.01, 0.02, 0.03, 0.01, -0.02]


@pytest.fixture
def returns_b():
    return [0.02, 0.01, 0.04, 0.00, -0.01]


@pytest.fixture
def price_table():
    return {
        "AAA": {
            "2024-01-02": 100.0,
            "2024-01-03": 101.0,
            "2024-01-04": 99.5,
            "2024-01-05": 102.0,
            "2024-01-08": 103.5,
        },
        "BBB": {
            "2024-01-02": 50.0,
            "2024-01-03": 49.0,
            "2024-01-04": 49.5,
            "2024-01-05": 51.0,
            "2024-01-08": 50.5,
        },
        "CCC": {
            "2024-01-02": 20.0,
            "2024-01-03": 20.4,
            "2024-01-04": 20.2,
            "2024-01-05": 20.1,
            "2024-01-08": 20.9,
        },
    }
