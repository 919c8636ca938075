# aclio/schemas/planner.py
"""
Request and response bodies for the plan generation endpoints.

Request fields are optional on purpose: the handlers check the one required
field themselves so a missing value gets a 400 with a readable message.
"""
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from aclio.schemas.goal import CamelModel, Step


class LenientModel(CamelModel):
    model_config = ConfigDict(extra="ignore")


class ProfileContext(LenientModel):
    name: Optional[str] = None
    age: Optional[Union[str, int]] = None
    gender: Optional[str] = None


class LocationContext(LenientModel):
    display: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None

    @property
    def label(self) -> Optional[str]:
        return self.display or self.city


class StepContext(LenientModel):
    id: Optional[int] = None
    title: str = ""
    description: str = ""


class GenerateStepsRequest(LenientModel):
    goal: Optional[str] = None
    profile: Optional[ProfileContext] = None
    location: Optional[LocationContext] = None
    additional_context: Optional[str] = None
    categories: Optional[str] = None


class GenerateQuestionsRequest(LenientModel):
    goal: Optional[str] = None
    profile: Optional[ProfileContext] = None


class StepTaskRequest(LenientModel):
    """Body for expand-step and do-it-for-me."""
    goal_name: Optional[str] = None
    # older clients send the goal name as "goal"
    goal: Optional[str] = None
    step: Optional[StepContext] = None
    profile: Optional[ProfileContext] = None

    @property
    def resolved_goal_name(self) -> Optional[str]:
        return self.goal_name or self.goal


class ChatTurn(LenientModel):
    role: str
    content: str = ""


class ChatStreamRequest(LenientModel):
    message: Optional[str] = None
    goal_name: Optional[str] = None
    goal_category: Optional[str] = None
    steps: List[StepContext] = Field(default_factory=list)
    completed_steps: List[int] = Field(default_factory=list)
    chat_history: List[ChatTurn] = Field(default_factory=list)
    profile: Optional[ProfileContext] = None


# Responses, as read by the client

class HealthResponse(CamelModel):
    status: str
    timestamp: Optional[str] = None
    api_key_configured: Optional[bool] = None


class PlanStep(LenientModel):
    id: int
    title: str
    description: str = ""
    duration: Optional[str] = None
    map_search: Optional[str] = None


class GenerateStepsResponse(LenientModel):
    steps: List[PlanStep]
    category: Optional[str] = None

    def to_steps(self) -> List[Step]:
        return [
            Step(id=s.id, title=s.title, description=s.description, duration=s.duration)
            for s in self.steps
        ]


class Question(LenientModel):
    id: Optional[int] = None
    question: str
    placeholder: Optional[str] = None


class GenerateQuestionsResponse(LenientModel):
    questions: List[Question]


class ExpandResource(LenientModel):
    name: str
    description: Optional[str] = None
    type: Optional[str] = None
    url: Optional[str] = None
    cost: Optional[str] = None


class ExpandStepResponse(LenientModel):
    detailed_guide: Optional[str] = None
    resources: Optional[List[ExpandResource]] = None
    tips: Optional[List[str]] = None
    search_query: Optional[str] = None

    @property
    def content(self) -> str:
        """Guide, tips and resources rendered as one markdown-ish block."""
        result = self.detailed_guide or ""

        if self.tips:
            result += "\n\n**Tips:**\n"
            for tip in self.tips:
                result += f"• {tip}\n"

        if self.resources:
            result += "\n**Resources:**\n"
            for resource in self.resources:
                result += f"• {resource.name}"
                if resource.cost:
                    result += f" ({resource.cost})"
                result += "\n"

        return result.strip()


class DoItForMeResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    result: Optional[str] = None
    content: Optional[str] = None

    @property
    def display_content(self) -> str:
        return self.result or self.content or ""
