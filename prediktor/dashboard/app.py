"""
Streamlit Dashboard
Prediktor

Pages:
  1. Login / registration (shown until a SessionContext is in session state)
  2. Dashboard: latest analysis & prediction, history
  3. Sector Analysis: company form, comparative analysis, charts, PDF export
  4. Action Plan
  5. Insights: growth projection, sector benchmark, scores
  6. Business Plan: generation and PDF export
  7. Settings: user profile and completion
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

import streamlit as st
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
from typing import List, Optional
import logging

from prediktor.agents.analyst import AnalysisService
from prediktor.agents.business_plan import BusinessPlanService
from prediktor.agents.errors import GeminiError, QuotaExceededError
from prediktor.agents.gemini import GeminiClient
from prediktor.config.settings import settings
from prediktor.db import storage
from prediktor.db.auth import AuthError, AuthService, SessionContext
from prediktor.db.database import get_db, init_db
from prediktor.db.profiles import (
    UserProfileService,
    missing_profile_fields,
    profile_completion_percentage,
)
from prediktor.models.schemas import (
    SECTION_TITLES,
    ActionPlan,
    BusinessPlanRequest,
    CompanyData,
    ComparativeAnalysis,
    GeneratedBusinessPlan,
    InsightData,
    SectionToggles,
    UserProfile,
    UserProfileUpdate,
)
from prediktor.utils.pdf_export import PDFExportService, build_export_filename
from prediktor.utils.pipeline import (
    load_last_analysis,
    run_business_plan,
    run_insights,
    run_sector_analysis,
)
from prediktor.utils.validation import SAMPLE_COMPANIES, format_fcfa, validate_company_data

logger = logging.getLogger(__name__)

COMPANY_COLOR = "#4a90e2"
SECTOR_COLOR = "#ffa500"

# ─── Page Config ─────────────────────────────────────────────────────────────

st.set_page_config(
    page_title="Prediktor",
    page_icon="📈",
    layout="wide",
    initial_sidebar_state="expanded",
)

# ─── Styling ─────────────────────────────────────────────────────────────────

st.markdown("""
<style>
    .demo-badge {
        background: #ffa500;
        color: white;
        border-radius: 20px;
        padding: 2px 10px;
        font-size: 12px;
        font-weight: bold;
    }
    h1 { color: #2d3748; }
    .stAlert { border-radius: 8px; }
</style>
""", unsafe_allow_html=True)


# ─── State Management ────────────────────────────────────────────────────────

def get_state():
    defaults = {
        "session": None,          # SessionContext once logged in
        "analysis": None,         # ComparativeAnalysis
        "is_demo_data": False,
        "analysis_error": None,
        "action_plan": None,      # ActionPlan
        "business_plan": None,    # GeneratedBusinessPlan
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value
    return st.session_state


@st.cache_resource
def bootstrap() -> bool:
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    init_db()
    return True


@st.cache_resource
def gemini_client() -> GeminiClient:
    """One HTTP session shared by every rerun of the app."""
    return GeminiClient()


def load_profile(session: SessionContext) -> Optional[UserProfile]:
    with get_db() as db:
        return UserProfileService(db).load_user_profile(session.user_id)


def show_gemini_error(error: GeminiError) -> None:
    if isinstance(error, QuotaExceededError):
        st.error(f"⏳ {error}")
    else:
        st.error(f"❌ The analysis service failed: {error}")


# ─── Login ───────────────────────────────────────────────────────────────────

def render_login(state) -> None:
    st.title("📈 Prediktor")
    st.caption("Sector analysis and business planning for small and medium enterprises")

    login_tab, register_tab = st.tabs(["🔑 Log in", "📝 Create an account"])

    with login_tab:
        with st.form("login"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Log in", type="primary")
        if submitted:
            try:
                with get_db() as db:
                    state.session = AuthService(db).login(email, password)
                st.rerun()
            except AuthError as e:
                st.error(str(e))

    with register_tab:
        with st.form("register"):
            email = st.text_input("Email", key="register_email")
            password = st.text_input("Password", type="password", key="register_password")
            submitted = st.form_submit_button("Create account", type="primary")
        if submitted:
            try:
                with get_db() as db:
                    state.session = AuthService(db).register(email, password)
                st.rerun()
            except AuthError as e:
                st.error(str(e))


# ─── Sidebar ─────────────────────────────────────────────────────────────────

PAGES = ["🏠 Dashboard", "📊 Sector Analysis", "🗺️ Action Plan", "💡 Insights", "📄 Business Plan", "⚙️ Settings"]


def render_sidebar(state) -> str:
    with st.sidebar:
        st.title("📈 Prediktor")
        st.caption(state.session.email)
        st.divider()
        page = st.radio("Navigation", PAGES, label_visibility="collapsed")
        st.divider()
        if not settings.GEMINI_API_KEY:
            st.warning("GEMINI_API_KEY is not set: analyses use demo data.")
        if st.button("Log out", use_container_width=True):
            for key in list(st.session_state.keys()):
                del st.session_state[key]
            st.rerun()
    return page


# ─── Charts ──────────────────────────────────────────────────────────────────

def revenue_chart(analysis: ComparativeAnalysis):
    df = pd.DataFrame([
        {"Label": p.label, "Series": series, "Value": value}
        for p in analysis.charts.revenue_comparison
        for series, value in (("Company", p.company), ("Sector", p.sector))
    ])
    fig = px.bar(
        df, x="Label", y="Value", color="Series", barmode="group",
        color_discrete_map={"Company": COMPANY_COLOR, "Sector": SECTOR_COLOR},
        title="Revenue comparison (FCFA)",
    )
    fig.update_layout(height=400, legend_title="")
    return fig


def trend_chart(analysis: ComparativeAnalysis):
    df = pd.DataFrame([p.model_dump() for p in analysis.charts.profitability_trend])
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        name="Company", x=df["period"], y=df["company"], mode="markers+lines",
        line=dict(color=COMPANY_COLOR, width=2),
    ))
    fig.add_trace(go.Scatter(
        name="Sector", x=df["period"], y=df["sector"], mode="markers+lines",
        line=dict(color=SECTOR_COLOR, width=2, dash="dash"),
    ))
    fig.update_layout(title="Profitability trend (%)", height=400)
    return fig


def position_chart(analysis: ComparativeAnalysis):
    df = pd.DataFrame([
        {"Metric": p.metric, "Series": series, "Value": value}
        for p in analysis.charts.market_position
        for series, value in (("Company", p.company), ("Sector", p.sector))
    ])
    # Metrics mix percentages and FCFA amounts: one linear axis per metric
    fig = px.bar(
        df, x="Value", y="Series", color="Series", orientation="h", facet_row="Metric",
        color_discrete_map={"Company": COMPANY_COLOR, "Sector": SECTOR_COLOR},
        title="Market position",
    )
    fig.update_xaxes(matches=None, showticklabels=True)
    fig.for_each_annotation(lambda a: a.update(text=a.text.split("=")[-1]))
    fig.update_layout(height=120 * max(1, df["Metric"].nunique()) + 80, legend_title="", showlegend=False)
    return fig


def health_gauge(score: float):
    fig = go.Figure(go.Indicator(
        mode="gauge+number",
        value=score,
        title={"text": "Health score"},
        gauge={
            "axis": {"range": [0, 100]},
            "bar": {"color": "#764ba2"},
            "steps": [
                {"range": [0, 40], "color": "#ffebee"},
                {"range": [40, 70], "color": "#fff9c4"},
                {"range": [70, 100], "color": "#e8f5e9"},
            ],
        },
    ))
    fig.update_layout(height=250)
    return fig


def bullet_list(items: List[str]) -> None:
    for item in items:
        st.markdown(f"- {item}")


# ─── Dashboard ───────────────────────────────────────────────────────────────

def render_dashboard(state) -> None:
    st.title("🏠 Dashboard")
    with get_db() as db:
        history = storage.get_user_history(db, state.session.user_id)
        analyses = storage.get_user_analyses(db, state.session.user_id)
        plans = storage.get_user_business_plans(db, state.session.user_id)

    last = history["lastAnalysis"]
    prediction = history["lastPrediction"]

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("📊 Analyses", len(analyses))
    col2.metric("📄 Business plans", len(plans))
    col3.metric("❤️ Last health score", f"{last['healthScore']['overall']:.0f}/100" if last else "-")
    col4.metric(
        "📈 Projected growth",
        f"{prediction['growthData']['projected12Months']:.1f}%" if prediction else "-",
    )

    if not analyses:
        st.info("👈 **Run a sector analysis** to see your company compared with its sector.")
        return

    st.subheader("🕑 Analysis history")
    df = pd.DataFrame([{
        "Date": a["createdAt"][:10],
        "Sector": a["companyData"]["sector"],
        "Revenue": format_fcfa(a["companyData"]["revenue"]),
        "Health score": a["healthScore"]["overall"],
        "Position": a["competitivePosition"]["position"],
        "Demo data": "⚠️" if a.get("isDemoData") else "",
    } for a in analyses])
    st.dataframe(df, use_container_width=True, hide_index=True)


# ─── Sector Analysis ─────────────────────────────────────────────────────────

def render_company_form() -> Optional[CompanyData]:
    samples = {"-": None, **{f"{c.sector} ({format_fcfa(c.revenue)})": c for c in SAMPLE_COMPANIES}}
    choice = st.selectbox("Start from a sample company", list(samples))
    sample = samples[choice]

    with st.form("company"):
        col1, col2, col3 = st.columns(3)
        year = col1.text_input("Year", value=sample.year if sample else "2024")
        sector = col2.text_input("Sector", value=sample.sector if sample else "")
        market = col3.text_input("Market", value=sample.market if sample else "")
        col4, col5, col6 = st.columns(3)
        revenue = col4.number_input("Revenue (FCFA)", min_value=0.0, step=1_000_000.0,
                                    value=float(sample.revenue) if sample else 0.0)
        expenses = col5.number_input("Expenses (FCFA)", min_value=0.0, step=1_000_000.0,
                                     value=float(sample.expenses) if sample else 0.0)
        employees = col6.number_input("Employees", min_value=0, step=1,
                                      value=sample.employees if sample else 0)
        submitted = st.form_submit_button("🚀 Analyze", type="primary")

    if not submitted:
        return None

    data = {"year": year, "revenue": revenue, "expenses": expenses,
            "employees": int(employees), "sector": sector.strip(), "market": market}
    errors = validate_company_data(data)
    if errors:
        for error in errors:
            st.error(error)
        return None
    return CompanyData(**data)


def render_sector_analysis(state) -> None:
    st.title("📊 Sector Analysis")
    company = render_company_form()

    if company is not None:
        with st.spinner("🤖 Analyzing your sector..."):
            profile = load_profile(state.session)
            with get_db() as db:
                outcome, _ = run_sector_analysis(
                    db, state.session, company, profile, service=AnalysisService(gemini_client())
                )
        state.analysis = outcome.analysis
        state.is_demo_data = outcome.is_demo_data
        state.analysis_error = getattr(outcome, "error", None)
        state.action_plan = None

    analysis: Optional[ComparativeAnalysis] = state.analysis
    if analysis is None:
        return

    if state.is_demo_data:
        st.warning(
            "⚠️ **Demo data.** The analysis service could not be reached, "
            "the figures below are illustrative."
            + (f"\n\nDetails: {state.analysis_error}" if state.analysis_error else "")
        )
    else:
        st.success("✅ Analysis complete!")

    tab1, tab2, tab3, tab4 = st.tabs(["📋 Overview", "📈 Charts", "🌍 Sector", "🎯 Recommendations"])

    with tab1:
        col_l, col_r = st.columns([1, 2])
        with col_l:
            st.plotly_chart(health_gauge(analysis.health_score.overall), use_container_width=True)
        with col_r:
            health = analysis.health_score
            c1, c2, c3, c4 = st.columns(4)
            c1.metric("Profitability", f"{health.profitability:.0f}")
            c2.metric("Efficiency", f"{health.efficiency:.0f}")
            c3.metric("Growth", f"{health.growth:.0f}")
            c4.metric("Market position", f"{health.market_position:.0f}")
            position = analysis.competitive_position
            st.markdown(f"### Position: **{position.position}** ({position.score:.0f}/100)")
            st.markdown(position.description)
        col_s, col_w = st.columns(2)
        with col_s:
            st.markdown("**💪 Strengths**")
            bullet_list(analysis.health_score.details.strengths)
        with col_w:
            st.markdown("**⚠️ Weaknesses**")
            bullet_list(analysis.health_score.details.weaknesses)

    with tab2:
        st.plotly_chart(revenue_chart(analysis), use_container_width=True)
        col_l, col_r = st.columns(2)
        col_l.plotly_chart(trend_chart(analysis), use_container_width=True)
        col_r.plotly_chart(position_chart(analysis), use_container_width=True)

    with tab3:
        sector = analysis.sector_data
        c1, c2, c3 = st.columns(3)
        c1.metric("Average revenue", format_fcfa(sector.average_revenue))
        c2.metric("Growth rate", f"{sector.growth_rate:.1f}%")
        c3.metric("Market size", format_fcfa(sector.market_size))
        col1, col2, col3 = st.columns(3)
        with col1:
            st.markdown("**📈 Trends**")
            bullet_list(sector.trends)
        with col2:
            st.markdown("**🧗 Challenges**")
            bullet_list(sector.challenges)
        with col3:
            st.markdown("**🚀 Opportunities**")
            bullet_list(sector.opportunities)

    with tab4:
        recs = analysis.recommendations
        col1, col2, col3 = st.columns(3)
        with col1:
            st.markdown("**Immediate**")
            bullet_list(recs.immediate)
        with col2:
            st.markdown("**Short term**")
            bullet_list(recs.short_term)
        with col3:
            st.markdown("**Long term**")
            bullet_list(recs.long_term)

    profile = load_profile(state.session)
    name = (profile.company_name if profile else "") or analysis.company_data.sector
    st.download_button(
        "⬇️ Download PDF report",
        data=PDFExportService().export_analysis(analysis, company_name=name),
        file_name=build_export_filename("Sector_Analysis", name),
        mime="application/pdf",
    )


def current_analysis(state) -> Optional[ComparativeAnalysis]:
    """Analysis from this session, else the latest stored one."""
    if state.analysis is None:
        with get_db() as db:
            last = load_last_analysis(db, state.session.user_id)
        if last is not None:
            state.analysis, state.is_demo_data = last
    return state.analysis


# ─── Action Plan ─────────────────────────────────────────────────────────────

def render_action_plan(state) -> None:
    st.title("🗺️ Action Plan")
    analysis = current_analysis(state)
    if analysis is None:
        st.info("No recent analysis found. Please run a sector analysis first.")
        return

    if st.button("🤖 Generate my action plan", type="primary"):
        with st.spinner("Building a personalised plan..."):
            try:
                service = AnalysisService(gemini_client())
                state.action_plan = service.generate_action_plan(analysis, load_profile(state.session))
            except GeminiError as e:
                show_gemini_error(e)

    plan: Optional[ActionPlan] = state.action_plan
    if plan is None:
        return

    st.subheader("🎯 Objectives")
    bullet_list(plan.objectives)

    st.subheader("🧩 Actions")
    cols = st.columns(max(len(plan.actions), 1))
    for col, category in zip(cols, plan.actions):
        with col:
            st.markdown(f"**{category.category}**")
            bullet_list(category.actions)

    st.subheader("🗓️ Timeline")
    for phase in plan.timeline:
        with st.expander(f"{phase.phase} ({phase.duration})", expanded=True):
            bullet_list(phase.actions)


# ─── Insights ────────────────────────────────────────────────────────────────

def render_insights(state) -> None:
    st.title("💡 Insights")
    analysis = current_analysis(state)
    if analysis is None:
        st.info("No recent analysis found. Please run a sector analysis first.")
        return

    with get_db() as db:
        last_prediction = storage.get_user_history(db, state.session.user_id)["lastPrediction"]

    if st.button("🔄 Compute insights from the latest analysis", type="primary") or last_prediction is None:
        profile = load_profile(state.session)
        with get_db() as db:
            insights, _ = run_insights(
                db, state.session, analysis, state.is_demo_data,
                company_name=profile.company_name if profile else None,
            )
    else:
        insights = InsightData.model_validate(last_prediction)
        st.caption(f"Computed on {last_prediction['createdAt'][:10]}")
    render_insight_data(insights)


def render_insight_data(insights: InsightData) -> None:
    if insights.metadata.is_demo_data:
        st.warning("⚠️ These insights are derived from demo data.")

    growth = insights.growth_data
    scores = insights.ai_scores
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Current growth", f"{growth.current:.1f}%")
    col2.metric("Projected (12 months)", f"{growth.projected_12_months:.1f}%",
                delta=f"{growth.evolution_12_months:+.1f} pts")
    col3.metric("Risk", scores.risk_level, help=scores.risk_description)
    col4.metric("Objective probability", f"{scores.objective_probability:.0f}%",
                help=scores.objective_description)

    df = pd.DataFrame([p.model_dump() for p in growth.monthly_projections])
    fig = px.line(df, x="month", y="growth", markers=True, title="Growth projection (%)")
    fig.add_vline(x=12, line_dash="dash", line_color="orange")
    fig.update_layout(height=400)
    st.plotly_chart(fig, use_container_width=True)

    bench = insights.benchmark_data
    df = pd.DataFrame([
        {"Indicator": i.indicator, "Series": series, "Value": value}
        for i in bench.indicators
        for series, value in (("Company", i.company), ("Sector", i.sector))
    ])
    fig = px.bar(
        df, x="Indicator", y="Value", color="Series", barmode="group",
        color_discrete_map={"Company": COMPANY_COLOR, "Sector": SECTOR_COLOR},
        title=f"Sector benchmark (gap {bench.gap:+.1f} pts)",
    )
    st.plotly_chart(fig, use_container_width=True)

    col_l, col_r = st.columns(2)
    with col_l:
        st.markdown(f"**🎯 {scores.recommendation.title}**")
        st.caption(f"{scores.recommendation.description} · {scores.recommendation.detail}")
    with col_r:
        st.markdown(f"**🚀 {scores.opportunity.title}**")
        st.caption(f"{scores.opportunity.description} · {scores.opportunity.detail}")


# ─── Business Plan ───────────────────────────────────────────────────────────

def render_business_plan_form(profile: Optional[UserProfile]) -> Optional[BusinessPlanRequest]:
    with st.form("business_plan"):
        col1, col2 = st.columns(2)
        company_name = col1.text_input("Company name", value=profile.company_name if profile else "")
        industry = col2.text_input("Industry", value=profile.industry if profile else "")
        description = st.text_area("Description")
        col3, col4 = st.columns(2)
        market_size = col3.text_input("Market size (FCFA)")
        target_market = col4.text_input("Target market")
        competitive_advantage = st.text_area("Competitive advantage")
        col5, col6 = st.columns(2)
        revenue_model = col5.text_input("Revenue model")
        funding_required = col6.text_input("Funding required (FCFA)")
        col7, col8 = st.columns(2)
        team_size = col7.text_input("Team size")
        timeline = col8.text_input("Time horizon")

        st.markdown("**Sections**")
        toggles = {}
        cols = st.columns(3)
        defaults = SectionToggles()
        for i, (name, title) in enumerate(SECTION_TITLES.items()):
            toggles[name] = cols[i % 3].checkbox(title, value=getattr(defaults, name))

        submitted = st.form_submit_button("🤖 Generate business plan", type="primary")

    if not submitted:
        return None
    if not company_name.strip() or not industry.strip():
        st.error("Company name and industry are required.")
        return None
    return BusinessPlanRequest(
        company_name=company_name.strip(),
        industry=industry.strip(),
        description=description,
        market_size=market_size,
        target_market=target_market,
        competitive_advantage=competitive_advantage,
        revenue_model=revenue_model,
        funding_required=funding_required,
        team_size=team_size,
        timeline=timeline,
        sections=SectionToggles(**toggles),
    )


def render_business_plan(state) -> None:
    st.title("📄 Business Plan")
    request = render_business_plan_form(load_profile(state.session))

    if request is not None:
        with st.spinner("Writing your business plan..."):
            try:
                with get_db() as db:
                    state.business_plan, _ = run_business_plan(
                        db, state.session, request, BusinessPlanService(gemini_client())
                    )
            except GeminiError as e:
                show_gemini_error(e)

    plan: Optional[GeneratedBusinessPlan] = state.business_plan
    if plan is None:
        return

    st.success(f"✅ Business plan for **{plan.metadata.company_name}** ready.")
    st.download_button(
        "⬇️ Download PDF",
        data=PDFExportService().export_business_plan(plan),
        file_name=build_export_filename("Business_Plan", plan.metadata.company_name),
        mime="application/pdf",
    )
    for _, section in plan.sections():
        with st.expander(section.title):
            st.markdown(section.content)
            for sub in section.subsections or []:
                st.markdown(f"**{sub.title}**")
                st.markdown(sub.content)


# ─── Settings ────────────────────────────────────────────────────────────────

def render_settings(state) -> None:
    st.title("⚙️ Settings")
    profile = load_profile(state.session)
    if profile is None:
        st.error("Profile not found.")
        return

    percentage = profile_completion_percentage(profile)
    st.progress(percentage / 100, text=f"Profile {percentage}% complete")
    missing = missing_profile_fields(profile)
    if missing:
        st.caption(f"Missing: {', '.join(missing)}")

    with st.form("profile"):
        st.subheader("👤 Personal")
        col1, col2 = st.columns(2)
        first_name = col1.text_input("First name", value=profile.first_name)
        last_name = col2.text_input("Last name", value=profile.last_name)
        col3, col4 = st.columns(2)
        phone = col3.text_input("Phone", value=profile.phone)
        function = col4.text_input("Function", value=profile.function)

        st.subheader("🏢 Company")
        col5, col6 = st.columns(2)
        company_name = col5.text_input("Company name", value=profile.company_name)
        company_size = col6.text_input("Company size", value=profile.company_size)
        col7, col8, col9 = st.columns(3)
        industry = col7.text_input("Industry", value=profile.industry)
        country = col8.text_input("Country", value=profile.country)
        currency = col9.text_input("Currency", value=profile.currency)
        address = st.text_input("Address", value=profile.address)
        website = st.text_input("Website", value=profile.website)

        st.subheader("🔔 Notifications")
        col10, col11 = st.columns(2)
        email_notifications = col10.checkbox("Email notifications", value=profile.email_notifications)
        weekly_reports = col11.checkbox("Weekly reports", value=profile.weekly_reports)

        saved = st.form_submit_button("💾 Save", type="primary")

    if saved:
        changes = UserProfileUpdate(
            first_name=first_name, last_name=last_name, phone=phone, function=function,
            company_name=company_name, company_size=company_size, industry=industry,
            country=country, currency=currency, address=address, website=website,
            email_notifications=email_notifications, weekly_reports=weekly_reports,
        )
        with get_db() as db:
            UserProfileService(db).update_user_profile(state.session.user_id, changes)
        st.success("✅ Profile saved.")
        st.rerun()


# ─── Main App ─────────────────────────────────────────────────────────────────

def main():
    bootstrap()
    state = get_state()

    if state.session is None:
        render_login(state)
        return

    page = render_sidebar(state)
    renderers = {
        PAGES[0]: render_dashboard,
        PAGES[1]: render_sector_analysis,
        PAGES[2]: render_action_plan,
        PAGES[3]: render_insights,
        PAGES[4]: render_business_plan,
        PAGES[5]: render_settings,
    }
    renderers[page](state)


if __name__ == "__main__":
    main()
