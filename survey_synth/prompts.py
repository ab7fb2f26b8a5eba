"""Prompt rendering for response generation and submission trait scoring."""

from typing import Any

from survey_synth.demographics import AGE_CHOICES
from survey_synth.models import (
    Answer,
    BusinessContext,
    DemographicsConfig,
    PersonaSeed,
    Question,
    QuestionKind,
    Trait,
)
from survey_synth.persona import EDUCATION_LEVELS, GENDERS, INCOME_BANDS

_OPTION_HEADINGS = {
    "multiple-choice": "OPTIONS REQUIRED",
    "scenario": "SCENARIO WITH OPTIONS",
    "image": "IMAGE SELECTION",
    "mood-board": "MOOD BOARD",
    "personality-matrix": "PERSONALITY MATRIX",
}

_DEMOGRAPHIC_RULES = {
    "age": (
        "- age: choose EXACTLY ONE integer bucket from {age}\n"
        "  (0 = prefer not to say, 18 = 18-24, 25 = 25-34, 35 = 35-44, 45 = 45-54, 55 = 55-64, 65 = 65+)"
    ),
    "gender": '- gender: choose EXACTLY ONE slug from {gender} ("" = prefer not to say)',
    "location": "- location: free-text city/region/country string",
    "education": "- education: choose EXACTLY ONE slug from {education}",
    "income": "- income: choose EXACTLY ONE slug from {income}",
}

_TRAIT_LIST = "\n".join(
    f'{i}. {t.label} (category: "{t.category}") - integer score 0-100'
    for i, t in enumerate(Trait, start=1)
)

_TRAIT_EXAMPLE = (
    "[\n"
    '  {"name": "Innovation", "score": 75, "category": "behavioral"},\n'
    '  {"name": "Analytical Thinking", "score": 80, "category": "cognitive"},\n'
    '  {"name": "Leadership", "score": 65, "category": "social"},\n'
    '  {"name": "Adaptability", "score": 70, "category": "behavioral"},\n'
    '  {"name": "Creativity", "score": 60, "category": "cognitive"}\n'
    "]"
)


def _quoted(values: list[Any]) -> str:
    return "[" + ", ".join(f'"{v}"' for v in values) + "]"


def _question_header(index: int, question: Question) -> list[str]:
    lines = [f"{index}. [ID: {question.id}] {question.text}"]
    type_line = f"   Type: {question.question_type}"
    if question.required:
        type_line += " (Required)"
    lines.append(type_line)
    if question.help_text:
        lines.append(f"   Help: {question.help_text}")
    if question.scenario_text:
        lines.append(f"   Scenario: {question.scenario_text}")
    return lines


def _question_instructions(question: Question) -> list[str]:
    kind = question.kind
    if kind is QuestionKind.OPTION:
        heading = _OPTION_HEADINGS.get(question.question_type, "OPTIONS REQUIRED")
        lines = [f"   {heading} - Select ONE option value:"]
        lines += [f"     - {opt.label} (value: {opt.value})" for opt in question.options]
        return lines
    if kind is QuestionKind.NUMERIC:
        low, high = question.numeric_range
        return [f"   SLIDER - Provide a whole number between {low} and {high}"]
    if kind is QuestionKind.RANKING:
        lines = ["   RANKING REQUIRED - Rank ALL of these options (1 = highest priority):"]
        lines += [f"     - {opt.label} (value: {opt.value})" for opt in question.options]
        return lines
    return ["   TEXT INPUT - Provide a realistic free-text response"]


def render_questions(questions: list[Question]) -> str:
    blocks = []
    for index, question in enumerate(sorted(questions, key=lambda q: q.order), start=1):
        blocks.append("\n".join(_question_header(index, question) + _question_instructions(question)))
    return "\n\n".join(blocks)


def render_business_context(context: BusinessContext) -> str:
    """Business context block; empty when no product name is set."""
    if not context.product_name:
        return ""
    return (
        "Business Context:\n"
        f"- Product: {context.product_name}\n"
        f"- Description: {context.product_description or 'Not provided'}\n"
        f"- Industry: {context.industry or 'General'}\n"
        f"- Target Market: {', '.join(context.target_market) or 'General consumers'}\n"
        f"- Pain Points: {', '.join(context.pain_points) or 'Not specified'}"
    )


def render_demographics(config: DemographicsConfig) -> str:
    enabled = config.enabled_fields()
    if not enabled:
        return "Demographics: none are enabled. Return an empty \"demographics\" object."
    enums = {
        "age": "[" + ", ".join(str(a) for a in AGE_CHOICES) + "]",
        "gender": _quoted(GENDERS),
        "education": _quoted(EDUCATION_LEVELS),
        "income": _quoted(INCOME_BANDS),
    }
    rules = [_DEMOGRAPHIC_RULES[name].format(**enums) for name in enabled]
    return "Demographics to generate (STRICT ENUMS, only these fields):\n" + "\n".join(rules)


def render_persona(seed: PersonaSeed, ordinal: int, config: DemographicsConfig) -> str:
    values = {
        "age": f"Target Age Bucket: {seed.age}",
        "gender": f"Target Gender: {seed.gender or 'prefer-not-to-say'}",
        "location": f"Target Location: {seed.location}",
        "education": f"Target Education: {seed.education}",
        "income": f"Target Income: {seed.income}",
    }
    lines = [f"Persona seed for response #{ordinal} (soft guidance for plausible variation):"]
    lines += [f"- {values[name]}" for name in config.enabled_fields()]
    lines.append(
        "Stay within the allowed enums, but bias answers and demographics toward this persona "
        "so responses differ from one another."
    )
    return "\n".join(lines)


def build_generation_prompt(
    questions: list[Question],
    context: BusinessContext,
    demographics: DemographicsConfig,
    seed: PersonaSeed,
    ordinal: int,
) -> str:
    """Render the full prompt for one synthetic respondent."""
    sections = [
        "You are generating realistic survey responses for a market research survey. "
        f"Generate response #{ordinal}, representing one real person taking this survey.",
        render_business_context(context),
        "Survey Questions:\n" + render_questions(questions),
        render_demographics(demographics),
        render_persona(seed, ordinal, demographics),
        "RESPONSE RULES:\n"
        "1. Questions with options: answer with exactly ONE of the listed option values, never a description.\n"
        "2. Slider questions: answer with a whole number inside the stated range.\n"
        "3. Ranking questions: answer with a JSON-encoded array ranking EVERY option once, e.g. "
        '"[{\\"rank\\":1,\\"option\\":\\"Label\\",\\"value\\":\\"option_a\\"}]".\n'
        "4. Text questions: write a short, realistic first-person answer.\n"
        "5. Vary option choices plausibly according to the persona; do not always pick the first option.",
        "OUTPUT FORMAT - respond ONLY with one JSON object containing:\n"
        '- "responses": array of {"questionId": <id>, "answer": <value>}, one per question\n'
        '- "demographics": object with ONLY the enabled fields listed above\n'
        '- "traits": array of EXACTLY these 5 traits, no synonyms:\n'
        f"{_TRAIT_LIST}\n"
        f"Traits example:\n{_TRAIT_EXAMPLE}\n"
        "Base trait scores on this respondent's answers so they are realistic and varied.",
        "Respond ONLY with valid JSON, no additional text.",
    ]
    return "\n\n".join(s for s in sections if s)


def build_trait_scoring_prompt(
    questions: list[Question],
    answers: list[Answer],
    context: BusinessContext,
) -> str:
    """Prompt asking for the five trait scores of a real submission."""
    selected = {a.question_id: a.value for a in answers}
    blocks = []
    for index, question in enumerate(sorted(questions, key=lambda q: q.order), start=1):
        lines = _question_header(index, question)
        if question.options:
            lines.append("   Options:")
            lines += [f"     - {opt.label} (value: {opt.value})" for opt in question.options]
        answer = selected.get(question.id)
        lines.append(f"   Selected Answer: {'null' if answer is None else answer}")
        blocks.append("\n".join(lines))

    context_lines = [
        f"Survey: {context.title or 'Untitled'}",
        f"Survey Type: {context.survey_type or 'general'}",
    ]
    if context.product_name:
        context_lines.append(f"Product: {context.product_name}")
    if context.product_description:
        context_lines.append(f"Description: {context.product_description}")
    if context.industry:
        context_lines.append(f"Industry: {context.industry}")
    if context.target_market:
        context_lines.append(f"Target Market: {', '.join(context.target_market)}")
    if context.pain_points:
        context_lines.append(f"Pain Points: {', '.join(context.pain_points)}")

    return "\n\n".join([
        "You are an expert psychometrics and market-research analyst.",
        "Analyze the survey submission and score ONLY these 5 traits from the respondent's answers:\n"
        f"{_TRAIT_LIST}",
        "Return ONLY a JSON array of exactly 5 objects with fields name, score (integer 0-100) "
        "and category. Names and categories must match exactly.",
        "Context:\n" + "\n".join(context_lines),
        "Questions, Options, and Selected Answers:\n" + "\n\n".join(blocks),
        f"Response format:\n{_TRAIT_EXAMPLE}",
    ])
