"""
Company figures: sanity checks, derived ratios and sample data.
"""

import math
from typing import Any, Dict, List, Union

from prediktor.models.schemas import CompanyData

SAMPLE_COMPANIES: List[CompanyData] = [
    CompanyData(year="2024", revenue=50_000_000, expenses=35_000_000, employees=25,
                sector="Technology", market="National"),
    CompanyData(year="2024", revenue=15_000_000, expenses=12_000_000, employees=8,
                sector="Commerce", market="Local"),
    CompanyData(year="2024", revenue=80_000_000, expenses=60_000_000, employees=45,
                sector="Services", market="Regional"),
    CompanyData(year="2024", revenue=25_000_000, expenses=22_000_000, employees=15,
                sector="Agriculture", market="Local"),
]


def validate_company_data(data: Dict[str, Any]) -> List[str]:
    """Return human-readable problems with a (possibly partial) company form."""
    errors = []
    revenue = data.get("revenue") or 0
    expenses = data.get("expenses") or 0
    employees = data.get("employees") or 0

    if not data.get("year"):
        errors.append("Year is required")
    if revenue <= 0:
        errors.append("Revenue must be positive")
    if expenses <= 0:
        errors.append("Expenses must be positive")
    if employees <= 0:
        errors.append("Number of employees must be positive")
    if not data.get("sector"):
        errors.append("Sector is required")

    if revenue and expenses and revenue < expenses:
        errors.append("Revenue must be greater than expenses")

    return errors


def round_half_up(value: float, digits: int = 0) -> Union[int, float]:
    """2.5 -> 3, -2.5 -> -2 (Python's round() would give 2 and -2)."""
    if digits == 0:
        return math.floor(value + 0.5)
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def calculate_profitability(revenue: float, expenses: float) -> float:
    """Net margin in percent; 0 when there is no revenue."""
    if revenue == 0:
        return 0.0
    return (revenue - expenses) / revenue * 100


def calculate_efficiency(revenue: float, employees: float) -> float:
    """Revenue per employee; 0 when there are no employees."""
    if employees == 0:
        return 0.0
    return revenue / employees


def format_fcfa(amount: float) -> str:
    """50000000 -> '50 000 000 FCFA'"""
    return f"{round_half_up(amount):,}".replace(",", " ") + " FCFA"
