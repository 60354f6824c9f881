"""
Business Plan Agent
-------------------
Generates a full business plan from the user's answers in a single call.

Sections the model leaves out come back with their default title and a
"content being generated" placeholder; metadata falls back to the company
name and industry from the request.

Input:  BusinessPlanRequest
Output: GeneratedBusinessPlan
"""

import logging
from typing import Optional

from prediktor.agents.analyst import GeminiAgent
from prediktor.agents.gemini import GeminiClient
from prediktor.agents.prompts import business_plan_prompt
from prediktor.models.schemas import BusinessPlanRequest, GeneratedBusinessPlan, iso_now

logger = logging.getLogger(__name__)


class BusinessPlanAgent(GeminiAgent):
    def __init__(self, client: GeminiClient):
        super().__init__("BusinessPlanAgent", client)

    def run(self, request: BusinessPlanRequest) -> GeneratedBusinessPlan:
        plan = self.ask(
            business_plan_prompt(request, generated_at=iso_now()),
            GeneratedBusinessPlan,
            context={"company_name": request.company_name, "industry": request.industry},
        )
        self.logger.info(
            f"[{self.name}] {len(plan.sections())} sections for '{request.company_name}'"
        )
        return plan


class BusinessPlanService:
    def __init__(self, client: Optional[GeminiClient] = None):
        self.client = client or GeminiClient()

    def generate_business_plan(self, request: BusinessPlanRequest) -> GeneratedBusinessPlan:
        """Raises GeminiError subclasses; there is no demo business plan."""
        return BusinessPlanAgent(self.client).run(request)
