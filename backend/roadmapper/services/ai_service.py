"""AI roadmap generation over the OpenAI chat completions API."""
import json
import logging
import re
from typing import Protocol

from openai import AsyncOpenAI, OpenAIError

from roadmapper.config import Settings, get_settings
from roadmapper.engine.context import ContextBundle
from roadmapper.engine.draft import RoadmapDraft
from roadmapper.errors import GenerationError
from roadmapper.schemas.roadmap import AllocationStrategy, GenerationParameters

logger = logging.getLogger(__name__)


ROADMAP_GENERATION_PROMPT = """You are an expert product manager and roadmap strategist. Your task is to build a product roadmap from the project context and customer feedback below.

## Project Context
{project_summary}

## Customer Feedback Analysis
{feedback_summary}

## Roadmap Parameters
- Roadmap name: {name}
- Time horizon: {time_horizon}
- Allocation: {strategic}% Strategic, {customer_driven}% Customer-driven, {maintenance}% Maintenance
- Focus areas: {focus_areas}
- Constraints: {constraints}

## Output Format
Return a single JSON object with exactly these fields:

- name: string
- description: string (1-2 sentences)
- type: one of "strategic-only", "customer-only", "balanced", "custom"
- timeHorizon: one of "quarter", "half-year", "year", "multi-year"
- allocationStrategy: {"strategic": number, "customerDriven": number, "maintenance": number} (must total 100)
- rationale: string (why this roadmap fits the context)
- items: array of {min_items}-{max_items} roadmap items, each with:
  - title: string
  - description: string
  - category: one of "strategic", "customer-driven", "maintenance", "innovation"
  - priority: one of "critical", "high", "medium", "low"
  - timeframe: {"quarter": "Q<n> <year>", "startDate": "YYYY-MM-DD", "endDate": "YYYY-MM-DD", "estimatedDuration": {"value": number, "unit": "days" | "weeks" | "months"}}
  - resourceAllocation: {"percentage": number 0-100, "teamMembers": integer, "estimatedCost": number}
  - dependencies: array of strings
  - relatedFeedback: array of {"feedbackId": string, "relevanceScore": number 0-10, "customerQuotes": array of strings}
  - businessJustification: {"strategicAlignment": number 0-10, "customerImpact": number 0-10, "revenueImpact": number 0-10, "riskLevel": "low" | "medium" | "high"}
  - successMetrics: array of strings
  - status: "proposed"

## Rules
- The share of items per category should follow the allocation percentages
- Ground customer-driven items in the feedback themes above
- Ground strategic items in the project goals
- Schedule items across the quarters of the time horizon, starting with the current quarter

Return ONLY valid JSON. No markdown, no explanation, no code blocks.
"""


def build_roadmap_prompt(
    context: ContextBundle,
    allocation: AllocationStrategy,
    parameters: GenerationParameters,
    min_items: int,
    max_items: int,
) -> str:
    values = {
        "project_summary": context.project_summary,
        "feedback_summary": context.feedback_summary,
        "name": parameters.name or "Not specified",
        "time_horizon": parameters.time_horizon,
        "strategic": f"{allocation.strategic:g}",
        "customer_driven": f"{allocation.customer_driven:g}",
        "maintenance": f"{allocation.maintenance:g}",
        "focus_areas": ", ".join(parameters.focus_areas) or "None specified",
        "constraints": ", ".join(parameters.constraints) or "None specified",
        "min_items": str(min_items),
        "max_items": str(max_items),
    }
    prompt = ROADMAP_GENERATION_PROMPT
    for key, value in values.items():
        prompt = prompt.replace("{" + key + "}", value)
    return prompt


def strip_code_fences(content: str) -> str:
    content = re.sub(r"^```\w*\n?", "", content.strip())
    content = re.sub(r"\n?```$", "", content)
    return content.strip()


class TextGenerator(Protocol):
    """Generative-text capability: prompt in, reply text out."""

    model: str

    async def complete(self, prompt: str) -> str: ...


class OpenAITextGenerator:
    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.client = AsyncOpenAI(api_key=settings.openai_api_key)
        self.model = settings.openai_model
        self.temperature = settings.openai_temperature

    async def complete(self, prompt: str) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": "You return only valid JSON. No markdown, no explanation."},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.temperature,
            )
        except OpenAIError as e:
            raise GenerationError(f"OpenAI request failed: {e}") from e
        if not response.choices:
            raise GenerationError("OpenAI reply contained no choices")
        return response.choices[0].message.content or ""


class AIRoadmapGenerator:
    """Prompts the text generator for a roadmap and parses the reply into an untrusted draft.

    Every failure mode surfaces as GenerationError so the caller can fall back.
    """

    def __init__(self, text_generator: TextGenerator, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.text_generator = text_generator
        self.min_items = settings.roadmap_min_items
        self.max_items = settings.roadmap_max_items

    async def generate(
        self,
        context: ContextBundle,
        allocation: AllocationStrategy,
        parameters: GenerationParameters,
    ) -> RoadmapDraft:
        prompt = build_roadmap_prompt(context, allocation, parameters, self.min_items, self.max_items)
        try:
            content = await self.text_generator.complete(prompt)
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(f"AI request failed: {e!r}") from e
        if not isinstance(content, str):
            raise GenerationError("AI reply is not text")
        try:
            data = json.loads(strip_code_fences(content))
        except ValueError as e:
            raise GenerationError(f"AI reply is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise GenerationError("AI reply is not a JSON object")
        items = data.get("items")
        if not isinstance(items, list) or not items:
            raise GenerationError("AI reply contains no roadmap items")

        logger.debug("AI reply parsed with %d candidate items", len(items))
        return RoadmapDraft.from_reply(data, prompt=prompt, model=self.text_generator.model)
