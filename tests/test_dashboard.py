"""
Dashboard chart builders.
"""

from prediktor.agents.fallback import build_fallback_analysis
from prediktor.dashboard.app import position_chart
from prediktor.models.schemas import CompanyData


class TestPositionChart:
    def test_zero_revenue_company_keeps_every_bar(self):
        company = CompanyData(year="2024", revenue=0, expenses=0, employees=0, sector="Services")
        analysis = build_fallback_analysis(company)

        fig = position_chart(analysis)

        values = [value for trace in fig.data for value in trace.x]
        assert len(values) == 2 * len(analysis.charts.market_position)
        assert 0 in values
        assert all(axis.type != "log" for axis in fig.select_xaxes())
