import json
import logging
from functools import lru_cache

from langchain_core.messages import HumanMessage
from langchain_groq import ChatGroq
from pydantic import TypeAdapter, ValidationError

from employee_sorter.backend_layer import (
    distribution_payload,
    extract_json,
    merge_rankings,
    ranking_payload,
)
from employee_sorter.config import (
    ANALYSIS_MODEL,
    DISTRIBUTION_MODEL,
    LLM_TEMPERATURE,
    MAX_ANALYSIS_PAGES,
    require_api_key,
)
from employee_sorter.errors import AnalysisFailed, DistributionFailed, RankingFailed
from employee_sorter.models import (
    AnalyzedEmployee,
    PageImage,
    RankedEmployee,
    RankingEntry,
    ResumeAnalysis,
    TaskAssignment,
)

logger = logging.getLogger(__name__)

JSON_OBJECT_MODE = {"type": "json_object"}


@lru_cache(maxsize=None)
def get_llm(model_name: str) -> ChatGroq:
    """Initialize (once per model) the Groq chat model."""
    return ChatGroq(
        temperature=LLM_TEMPERATURE,
        model_name=model_name,
        groq_api_key=require_api_key(),
    )


# -------------------------
# Response Schemas
# -------------------------
ANALYSIS_SCHEMA = {
    "type": "object",
    "properties": {
        "summary": {"type": "string", "description": "A concise professional summary of the candidate."},
        "skills": {
            "type": "array",
            "items": {"type": "string"},
            "description": "A list of the candidate's key technical and soft skills.",
        },
        "experienceYears": {"type": "number", "description": "Total years of professional experience."},
    },
    "required": ["summary", "skills", "experienceYears"],
}

RANKING_SCHEMA = {
    "type": "object",
    "properties": {
        "rankings": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "rank": {"type": "integer"},
                    "justification": {"type": "string"},
                },
                "required": ["id", "rank", "justification"],
            },
        },
    },
    "required": ["rankings"],
}

DISTRIBUTION_SCHEMA = {
    "type": "object",
    "properties": {
        "assignments": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "employeeId": {"type": "string"},
                    "tasks": {"type": "array", "items": {"type": "string"}},
                },
                "required": ["employeeId", "tasks"],
            },
        },
    },
    "required": ["assignments"],
}

_ranking_adapter = TypeAdapter(list[RankingEntry])
_assignment_adapter = TypeAdapter(list[TaskAssignment])


def _unwrap(payload, key: str):
    """JSON-object mode needs an object root; lists travel under `key`."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and key in payload:
        return payload[key]
    raise ValueError(f"Expected a JSON object with a {key!r} list")


def _schema_instructions(schema: dict, shape: str) -> str:
    return f"""
Respond ONLY with a valid JSON {shape} matching this JSON schema:
{json.dumps(schema)}

Do NOT add any explanations, markdown formatting, or text outside the JSON {shape}.
"""


# -------------------------
# Prompts
# -------------------------
ANALYSIS_PROMPT = (
    "Analyze the resume from the provided image(s). Extract a concise professional summary, "
    "a list of key skills, and the total years of professional experience as a number. "
    "Provide the output in a structured JSON format."
)


def build_analysis_message(images: list[PageImage]) -> HumanMessage:
    content = [{"type": "image_url", "image_url": {"url": image.data_uri()}} for image in images]
    content.append({
        "type": "text",
        "text": ANALYSIS_PROMPT + "\n" + _schema_instructions(ANALYSIS_SCHEMA, "object"),
    })
    return HumanMessage(content=content)


def build_ranking_prompt(employees: list[AnalyzedEmployee]) -> str:
    employee_data = json.dumps(ranking_payload(employees))
    return (
        "Analyze the following employee data. Based on their summary, skills, and years of experience, "
        "assign a rank from 1 to 100 to each employee, where 100 is the most qualified. "
        "Provide a brief justification for each rank. Return the EXACT id provided for each employee. "
        f"The employee data is provided as a JSON string: {employee_data}\n"
        + _schema_instructions(RANKING_SCHEMA, "object")
    )


def build_distribution_prompt(employees: list[RankedEmployee], tasks: list[str]) -> str:
    employee_data = json.dumps(distribution_payload(employees))
    return (
        f"Here is a list of ranked employees with their skills: {employee_data}. "
        f"And here is a list of daily tasks: {json.dumps(tasks)}. "
        "Distribute the tasks to the most suitable employees based on their rank and skills. "
        "Assign tasks fairly and efficiently. Each task should be assigned to only one employee. "
        "Use the EXACT employee id as employeeId.\n"
        + _schema_instructions(DISTRIBUTION_SCHEMA, "object")
    )


# -------------------------
# Remote Calls
# -------------------------
async def analyze_resume(images: list[PageImage], llm=None) -> ResumeAnalysis:
    """
    Extracts summary, skills and years of experience from resume page images.
    Any transport, JSON or schema failure surfaces as AnalysisFailed.
    """
    if len(images) > MAX_ANALYSIS_PAGES:
        logger.warning("Resume has %d pages, the model accepts %d", len(images), MAX_ANALYSIS_PAGES)
        raise AnalysisFailed(
            f"Failed to analyze resume: it has {len(images)} pages and at most {MAX_ANALYSIS_PAGES} are supported."
        )

    llm = llm or get_llm(ANALYSIS_MODEL)
    try:
        response = await llm.bind(response_format=JSON_OBJECT_MODE).ainvoke([build_analysis_message(images)])
        analysis = ResumeAnalysis.model_validate(extract_json(response.content))
    except (ValidationError, ValueError) as exc:
        logger.exception("Error parsing resume analysis")
        raise AnalysisFailed("Failed to analyze resume: the model returned an unexpected format.") from exc
    except Exception as exc:
        logger.exception("Error analyzing resume")
        raise AnalysisFailed() from exc

    logger.info("Analyzed resume (%d page(s), %d skill(s))", len(images), len(analysis.skills))
    return analysis


async def rank_employees(employees: list[AnalyzedEmployee], llm=None) -> list[RankedEmployee]:
    """
    Ranks every employee 1-100 and merges the result back onto the roster.
    The returned list always has one entry per input employee, highest rank first.
    """
    if not employees:
        return []

    prompt = build_ranking_prompt(employees)
    logger.debug("Ranking prompt: %s", prompt[:200])
    llm = llm or get_llm(ANALYSIS_MODEL)
    try:
        response = await llm.bind(response_format=JSON_OBJECT_MODE).ainvoke(prompt)
        entries = _ranking_adapter.validate_python(_unwrap(extract_json(response.content), "rankings"))
    except Exception as exc:
        logger.exception("Error ranking employees")
        raise RankingFailed() from exc

    ranked = merge_rankings(employees, entries)
    logger.info("Ranked %d employee(s) from %d response entries", len(ranked), len(entries))
    return ranked


async def distribute_tasks(employees: list[RankedEmployee], tasks: list[str], llm=None) -> list[TaskAssignment]:
    """
    Asks the model to assign each task to one employee.
    Coverage of the task list is best-effort: it is not checked locally.
    """
    prompt = build_distribution_prompt(employees, tasks)
    logger.debug("Distribution prompt: %s", prompt[:200])
    llm = llm or get_llm(DISTRIBUTION_MODEL)
    try:
        response = await llm.bind(response_format=JSON_OBJECT_MODE).ainvoke(prompt)
        assignments = _assignment_adapter.validate_python(_unwrap(extract_json(response.content), "assignments"))
    except Exception as exc:
        logger.exception("Error distributing tasks")
        raise DistributionFailed() from exc

    logger.info("Received %d assignment(s) for %d task(s)", len(assignments), len(tasks))
    return assignments
