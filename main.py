"""
Entry point for Prediktor.

Usage:
  # Analyze a sample company (demo data when GEMINI_API_KEY is unset):
  python main.py demo
  python main.py demo --company 2

  # Start the FastAPI server:
  python main.py api

  # Start the Streamlit dashboard:
  python main.py dashboard

  # Run tests:
  python main.py test
"""

from __future__ import annotations

import argparse
import logging
import os
import subprocess
import sys

from prediktor.config.settings import settings

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger("main")

ROOT = os.path.dirname(os.path.abspath(__file__))


def demo(company_index: int = 0):
    """
    Comparative analysis + insights for one of the sample companies.
    Prints a formatted report to stdout; nothing is persisted.
    """
    from prediktor.agents.analyst import AnalysisService
    from prediktor.agents.insights import build_insights
    from prediktor.utils.pipeline import summarize_outcome
    from prediktor.utils.validation import (
        SAMPLE_COMPANIES, calculate_efficiency, calculate_profitability, format_fcfa,
    )

    company = SAMPLE_COMPANIES[company_index % len(SAMPLE_COMPANIES)]
    logger.info(f"=== Prediktor: Demo Run ({company.sector}) ===")

    outcome = AnalysisService().generate_comparative_analysis(company)
    logger.info(f"Outcome: {summarize_outcome(outcome)}")
    analysis = outcome.analysis
    insights = build_insights(analysis, is_demo_data=outcome.is_demo_data)

    print("\n" + "=" * 70)
    print("  PREDIKTOR SECTOR ANALYSIS")
    print("=" * 70)
    print(f"  Sector        : {company.sector} ({company.market})")
    print(f"  Revenue       : {format_fcfa(company.revenue)}")
    print(f"  Expenses      : {format_fcfa(company.expenses)}")
    print(f"  Employees     : {company.employees}")
    print(f"  Profitability : {calculate_profitability(company.revenue, company.expenses):.1f}%")
    print(f"  Rev./employee : {format_fcfa(calculate_efficiency(company.revenue, company.employees))}")
    print(f"  Data          : {'DEMO (analysis service unavailable)' if outcome.is_demo_data else 'live'}")
    print("=" * 70)

    health = analysis.health_score
    print("\n❤️  HEALTH SCORE")
    print("-" * 70)
    print(f"  Overall {health.overall:.0f}/100  |  profitability {health.profitability:.0f}  "
          f"efficiency {health.efficiency:.0f}  growth {health.growth:.0f}  "
          f"market position {health.market_position:.0f}")

    position = analysis.competitive_position
    print("\n🏁 COMPETITIVE POSITION")
    print("-" * 70)
    print(f"  {position.position.upper()} ({position.score:.0f}/100): {position.description}")

    print("\n📈 PROFITABILITY TREND (company vs sector, %)")
    print("-" * 70)
    for point in analysis.charts.profitability_trend:
        print(f"  {point.period:<8} {point.company:>8.1f}  {point.sector:>8.1f}")

    print("\n🎯 RECOMMENDATIONS")
    print("-" * 70)
    for label, items in (
        ("Immediate", analysis.recommendations.immediate),
        ("Short term", analysis.recommendations.short_term),
        ("Long term", analysis.recommendations.long_term),
    ):
        for item in items:
            print(f"  [{label}] {item}")

    growth = insights.growth_data
    print("\n" + "=" * 70)
    print("  💡 INSIGHTS")
    print("=" * 70)
    print(f"  Growth now / in 12 months : {growth.current:.1f}% → {growth.projected_12_months:.1f}%")
    print(f"  Risk                      : {insights.ai_scores.risk_level} "
          f"({insights.ai_scores.risk_percentage:.0f}%)")
    print(f"  Objective probability     : {insights.ai_scores.objective_probability:.0f}%")
    print("=" * 70)

    return outcome


def start_api():
    """Start the FastAPI server."""
    import uvicorn
    uvicorn.run(
        "prediktor.api.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
    )


def start_dashboard():
    """Launch the Streamlit dashboard."""
    dashboard_path = os.path.join(ROOT, "prediktor", "dashboard", "app.py")
    subprocess.run(
        ["streamlit", "run", dashboard_path, "--server.port", str(settings.DASHBOARD_PORT)],
        check=True,
    )


def run_tests():
    """Run pytest."""
    result = subprocess.run(["pytest", "tests/", "-v", "--tb=short"], cwd=ROOT)
    sys.exit(result.returncode)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Prediktor: sector analysis & business planning")
    parser.add_argument(
        "command",
        nargs="?",
        default="demo",
        choices=["demo", "api", "dashboard", "test"],
    )
    parser.add_argument(
        "--company",
        type=int,
        default=0,
        help="Index of the sample company used by the demo",
    )
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = parse_args()

    if args.command == "demo":
        demo(args.company)
    elif args.command == "api":
        start_api()
    elif args.command == "dashboard":
        start_dashboard()
    elif args.command == "test":
        run_tests()
