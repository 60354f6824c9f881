"""
Company figure checks and formatting helpers.
"""

import pytest

from prediktor.utils.validation import (
    calculate_efficiency,
    calculate_profitability,
    format_fcfa,
    round_half_up,
    validate_company_data,
)


class TestRoundHalfUp:
    @pytest.mark.parametrize("value, expected", [
        (2.5, 3),
        (3.5, 4),
        (-2.5, -2),
        (13.5, 14),
        (24.4, 24),
    ])
    def test_integers(self, value, expected):
        assert round_half_up(value) == expected

    def test_one_decimal(self):
        assert round_half_up(0.25, 1) == 0.3
        assert round_half_up(12.04, 1) == 12.0


class TestFigures:
    def test_ratios(self):
        assert calculate_profitability(5_000_000, 3_500_000) == pytest.approx(30)
        assert calculate_profitability(0, 100) == 0
        assert calculate_efficiency(5_000_000, 10) == 500_000
        assert calculate_efficiency(5_000_000, 0) == 0

    def test_format_fcfa(self):
        assert format_fcfa(50_000_000) == "50 000 000 FCFA"
        assert format_fcfa(2.5) == "3 FCFA"

    def test_validate_company_data(self):
        assert validate_company_data({
            "year": "2024", "revenue": 5, "expenses": 3, "employees": 1, "sector": "Commerce",
        }) == []
        errors = validate_company_data({"revenue": 3, "expenses": 5})
        assert "Year is required" in errors
        assert "Revenue must be greater than expenses" in errors
