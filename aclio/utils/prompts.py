# aclio/utils/prompts.py
from typing import Dict, List, Optional

from aclio.schemas.goal import GOAL_CATEGORIES
from aclio.schemas.planner import (
    ChatStreamRequest,
    GenerateStepsRequest,
    LocationContext,
    ProfileContext,
    StepContext,
)

Message = Dict[str, str]

STEPS_MAX_TOKENS = 8000
QUESTIONS_MAX_TOKENS = 500
EXPAND_MAX_TOKENS = 2000
DO_IT_MAX_TOKENS = 3000
CHAT_MAX_TOKENS = 1000
CHAT_HISTORY_TURNS = 4


def _profile_context(profile: Optional[ProfileContext], tailor: bool = True) -> str:
    if profile is None or not profile.name:
        return ""
    age = f"{profile.age} years old" if profile.age else ""
    if not tailor:
        return f"The user is {profile.name}, {age}."
    gender = f"({profile.gender})" if profile.gender else ""
    return (
        f"The user is {profile.name}, {age} {gender}. "
        "Tailor the plan to be appropriate and relevant for them."
    )


def _location_context(location: Optional[LocationContext]) -> str:
    if location is None or not location.label:
        return ""
    country = f", {location.country}" if location.country else ""
    return (
        f"The user is located in {location.label}{country}. When suggesting resources like classes, "
        "studios, gyms, stores, or any local businesses, include a \"mapSearch\" field with the "
        "Google Maps search query."
    )


def generate_steps_messages(request: GenerateStepsRequest) -> List[Message]:
    user_context = _profile_context(request.profile)
    question_context = (
        f"\nAdditional context from user:\n{request.additional_context}"
        if request.additional_context else ""
    )
    has_location = bool(request.location and request.location.label)
    location_context = _location_context(request.location)
    categories = request.categories or ", ".join(GOAL_CATEGORIES)
    map_search_field = ',"mapSearch":"Google Maps search query if relevant"' if has_location else ""

    system = f"""You are a supportive personal coach who creates HIGHLY DETAILED, step-by-step action plans. Your job is to hold the user's hand and guide them through every small action needed to achieve their goal.

{user_context}{question_context}
{location_context}

CRITICAL RULES:
1. Break everything down into SMALL, IMMEDIATELY ACTIONABLE steps
2. Each step should take 5-30 minutes to complete (rarely longer)
3. Be SPECIFIC - instead of "research options", say "Open Google and search for [specific query]"
4. Include exact websites, apps, or tools to use
5. Tell them exactly what to look for, what to write down, what to click
6. Assume they know NOTHING - explain every detail
7. Each step should have ONE clear action, not multiple tasks
8. Generate 20-40 steps depending on goal complexity
9. Make the user feel guided and supported, never overwhelmed

RESPONSE FORMAT (JSON object only):
{{
  "category": "One of: {categories}",
  "steps": [
    {{"id":1,"title":"Short action verb + specific task","description":"Exactly what to do, where to go, what to click/write/say. Be specific and encouraging.","duration":"X mins"{map_search_field}}}
  ]
}}

EXAMPLE of good granular steps for "Learn Guitar":
- BAD: "Buy a guitar" (too broad)
- GOOD: "Research beginner guitars online - Open guitarworld.com/best-beginner-guitars and read through the top 5 recommendations. Write down 2-3 options in your price range."
- GOOD: "Watch a guitar size guide - Search YouTube for 'how to choose guitar size beginners' and watch one video to understand what size fits you."
- GOOD: "Set your budget - Decide how much you can spend. For beginners, $100-200 is enough for a decent acoustic guitar."

Output ONLY the JSON object, nothing else."""

    user = (
        f'Goal: "{request.goal}" - Create a comprehensive, hand-holding action plan with many small, '
        "specific steps. Guide me like I'm a complete beginner. "
        'ONLY JSON object with "category" and "steps" fields.'
    )
    return [{"role": "system", "content": system}, {"role": "user", "content": user}]


QUESTIONS_SYSTEM_PROMPT = """You help gather context for goal planning. Generate exactly 3 short, specific questions to better understand the user's goal.

Return ONLY a JSON array of 3 question objects:
[
  { "id": 1, "question": "Short question?", "placeholder": "Example answer" },
  { "id": 2, "question": "Short question?", "placeholder": "Example answer" },
  { "id": 3, "question": "Short question?", "placeholder": "Example answer" }
]

Rules:
- Questions should be specific to the goal
- Keep questions short (under 10 words)
- Placeholders should be realistic examples
- Output ONLY the JSON array, nothing else"""


def generate_questions_messages(goal: str) -> List[Message]:
    return [
        {"role": "system", "content": QUESTIONS_SYSTEM_PROMPT},
        {"role": "user", "content": f'Goal: "{goal}"\n\nGenerate 3 contextual questions. ONLY JSON array.'},
    ]


EXPAND_SYSTEM_PROMPT = """You help users achieve their goals by providing detailed resources and recommendations.

Return a JSON object with this EXACT structure:
{
  "detailedGuide": "A comprehensive 3-5 paragraph guide on how to complete this step effectively.",
  "resources": [
    {
      "name": "Resource name",
      "description": "Brief description",
      "type": "course|video|article|app|website|book|tool",
      "url": "https://actual-url.com",
      "cost": "Free|Paid|Freemium|$XX"
    }
  ],
  "tips": ["Tip 1", "Tip 2", "Tip 3"],
  "searchQuery": "Google search query for more resources"
}

Include 3-5 REAL resources with actual working URLs.
Output ONLY the JSON object, no other text."""


def expand_step_messages(goal_name: Optional[str], step: StepContext) -> List[Message]:
    user = (
        f'Goal: "{goal_name or ""}"\nStep: "{step.title}"\nDetails: "{step.description}"\n\n'
        "Provide detailed resources and tips. Return ONLY JSON."
    )
    return [{"role": "system", "content": EXPAND_SYSTEM_PROMPT}, {"role": "user", "content": user}]


def do_it_for_me_messages(
    goal_name: Optional[str], step: StepContext, profile: Optional[ProfileContext]
) -> List[Message]:
    system = f"""You are a helpful AI assistant that completes tasks for users.

When asked to create something (schedule, plan, list, outline, etc.), provide a COMPLETE and DETAILED result that the user can immediately use.

Format your response nicely with:
- Clear headings (use ** for bold)
- Bullet points or numbered lists where appropriate
- Tables for schedules (use | format)
- Specific times, dates, or details

{_profile_context(profile, tailor=False)}

Be thorough and practical. The user should be able to use your output immediately."""

    user = (
        f'Goal: "{goal_name or ""}"\n\nTask to complete: "{step.title}"\nDetails: "{step.description}"\n\n'
        "Please complete this task for me. Be specific and detailed."
    )
    return [{"role": "system", "content": system}, {"role": "user", "content": user}]


def _plan_summary(request: ChatStreamRequest) -> str:
    if not request.steps:
        return ""
    completed = set(request.completed_steps)
    lines = [
        f"- [{'x' if step.id in completed else ' '}] {step.title}"
        for step in request.steps
    ]
    return (
        f"\nTheir plan ({len(completed)} of {len(request.steps)} steps done):\n"
        + "\n".join(lines)
    )


def chat_messages(request: ChatStreamRequest) -> List[Message]:
    name = request.profile.name if request.profile and request.profile.name else "the user"
    goal_name = request.goal_name or "General"
    category = request.goal_category or "Personal"

    system = f"""You are Aclio, a warm and encouraging goal coach. You are talking with {name}.

They are working on the goal "{goal_name}" (category: {category}).{_plan_summary(request)}

Guidelines:
- Keep replies short and conversational (2-5 sentences unless asked for more)
- Refer to their actual steps and progress when it helps
- Suggest one concrete next action when they seem stuck
- Celebrate progress, never lecture"""

    messages: List[Message] = [{"role": "system", "content": system}]
    for turn in request.chat_history[-CHAT_HISTORY_TURNS:]:
        if turn.role in ("user", "assistant") and turn.content:
            messages.append({"role": turn.role, "content": turn.content})
    messages.append({"role": "user", "content": request.message or ""})
    return messages
