"""
Analysis Agents
---------------
Comparative analysis of a company against its sector, in three sequential
calls to the generative API:

  SectorDataAgent → HealthScoreAgent → PositioningAgent

Each agent fills in one more part of an AnalysisDraft. If any step fails the
whole analysis is replaced by deterministic demo data (see agents.fallback)
and flagged as such.

Input:  AnalysisDraft (company + profile)
Output: ComparativeAnalysis
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Type

from prediktor.agents.base import Agent, AnalysisOutcome, Demo, Live, Orchestrator
from prediktor.agents.fallback import build_fallback_analysis
from prediktor.agents.gemini import GeminiClient
from prediktor.agents.normalizer import ModelT, parse_model
from prediktor.agents.prompts import (
    ProfileContext,
    action_plan_prompt,
    comparative_analysis_prompt,
    health_score_prompt,
    sector_data_prompt,
)
from prediktor.models.schemas import (
    ActionPlan,
    AnalysisDelta,
    CompanyData,
    ComparativeAnalysis,
    HealthScore,
    SectorData,
    UserProfile,
)

logger = logging.getLogger(__name__)


# ─── Data Structures ─────────────────────────────────────────────────────────


@dataclass
class AnalysisDraft:
    """Partial comparative analysis handed from one agent to the next."""
    company: CompanyData
    context: ProfileContext
    sector_data: Optional[SectorData] = None
    health_score: Optional[HealthScore] = None


# ─── Agents ──────────────────────────────────────────────────────────────────


class GeminiAgent(Agent):
    """Agent whose `run` is one prompt → one validated record."""

    def __init__(self, name: str, client: GeminiClient):
        super().__init__(name)
        self.client = client

    def ask(
        self,
        prompt: str,
        model: Type[ModelT],
        context: Optional[Dict[str, Any]] = None,
    ) -> ModelT:
        text = self.client.generate_content(prompt)
        self.logger.debug(f"[{self.name}] Raw response: {text[:500]!r}")
        return parse_model(text, model, context=context)


class SectorDataAgent(GeminiAgent):
    def __init__(self, client: GeminiClient):
        super().__init__("SectorDataAgent", client)

    def run(self, draft: AnalysisDraft) -> AnalysisDraft:
        draft.sector_data = self.ask(
            sector_data_prompt(draft.company.sector, draft.context), SectorData
        )
        return draft


class HealthScoreAgent(GeminiAgent):
    def __init__(self, client: GeminiClient):
        super().__init__("HealthScoreAgent", client)

    def run(self, draft: AnalysisDraft) -> AnalysisDraft:
        draft.health_score = self.ask(
            health_score_prompt(draft.company, draft.sector_data, draft.context),
            HealthScore,
        )
        return draft


class PositioningAgent(GeminiAgent):
    def __init__(self, client: GeminiClient):
        super().__init__("PositioningAgent", client)

    def run(self, draft: AnalysisDraft) -> ComparativeAnalysis:
        delta = self.ask(
            comparative_analysis_prompt(
                draft.company, draft.sector_data, draft.health_score, draft.context
            ),
            AnalysisDelta,
        )
        return ComparativeAnalysis.assemble(
            draft.company, draft.sector_data, draft.health_score, delta
        )


class ActionPlanAgent(GeminiAgent):
    def __init__(self, client: GeminiClient, context: ProfileContext):
        super().__init__("ActionPlanAgent", client)
        self.context = context

    def run(self, analysis: ComparativeAnalysis) -> ActionPlan:
        return self.ask(action_plan_prompt(analysis, self.context), ActionPlan)


# ─── Service ─────────────────────────────────────────────────────────────────


class AnalysisService:
    """
    Entry point for company analysis.

    Individual steps raise GeminiError subclasses; only the comparative
    analysis recovers, by falling back to demo data.
    """

    def __init__(self, client: Optional[GeminiClient] = None):
        self.client = client or GeminiClient()

    def analyze_sector_data(self, sector: str, profile: Optional[UserProfile] = None) -> SectorData:
        agent = SectorDataAgent(self.client)
        draft = AnalysisDraft(
            company=CompanyData(year="", revenue=0, expenses=0, employees=0, sector=sector),
            context=ProfileContext.from_profile(profile),
        )
        return agent.run(draft).sector_data

    def calculate_health_score(
        self,
        company: CompanyData,
        sector_data: SectorData,
        profile: Optional[UserProfile] = None,
    ) -> HealthScore:
        agent = HealthScoreAgent(self.client)
        draft = AnalysisDraft(
            company=company,
            context=ProfileContext.from_profile(profile),
            sector_data=sector_data,
        )
        return agent.run(draft).health_score

    def generate_comparative_analysis(
        self,
        company: CompanyData,
        profile: Optional[UserProfile] = None,
    ) -> AnalysisOutcome:
        pipeline = Orchestrator(
            [
                SectorDataAgent(self.client),
                HealthScoreAgent(self.client),
                PositioningAgent(self.client),
            ],
            stop_on_failure=True,
        )
        draft = AnalysisDraft(company=company, context=ProfileContext.from_profile(profile))
        result = pipeline.execute(draft)
        logger.info(pipeline.summary())

        if result.success:
            return Live(analysis=result.data)

        logger.warning(
            f"Comparative analysis for sector '{company.sector}' failed "
            f"at {result.agent_name}; using demo data: {result.error}"
        )
        return Demo(analysis=build_fallback_analysis(company), error=result.error)

    def generate_action_plan(
        self,
        analysis: ComparativeAnalysis,
        profile: Optional[UserProfile] = None,
    ) -> ActionPlan:
        agent = ActionPlanAgent(self.client, ProfileContext.from_profile(profile))
        return agent.run(analysis)
