import json
import uuid

from employee_sorter.config import UNRANKED_JUSTIFICATION, UNRANKED_RANK
from employee_sorter.models import AnalyzedEmployee, RankedEmployee, RankingEntry, ResumeAnalysis


# -------------------------
# Model Output Parsing (LLM safe)
# -------------------------
def extract_json(ai_output: str):
    """
    Parses model text as JSON. Falls back to the outermost [...] or {...}
    span when the model wraps the payload in prose or markdown fences.
    Raises ValueError when nothing parseable is found.
    """
    try:
        return json.loads(ai_output)
    except (json.JSONDecodeError, TypeError):
        pass

    text = ai_output or ""
    for opener, closer in (("[", "]"), ("{", "}")):
        start = text.find(opener)
        end = text.rfind(closer) + 1
        if start != -1 and end > start:
            try:
                return json.loads(text[start:end])
            except json.JSONDecodeError:
                continue

    raise ValueError("Model output is not valid JSON")


# -------------------------
# Roster Building
# -------------------------
def new_employee_id():
    return str(uuid.uuid4())


def build_employee(name: str, analysis: ResumeAnalysis, employee_id: str | None = None) -> AnalyzedEmployee:
    return AnalyzedEmployee(
        id=employee_id or new_employee_id(),
        name=name.strip(),
        summary=analysis.summary,
        skills=list(analysis.skills),
        experience_years=analysis.experience_years,
    )


def ranking_payload(employees: list[AnalyzedEmployee]) -> list[dict]:
    return [
        {
            "id": e.id,
            "name": e.name,
            "summary": e.summary,
            "skills": list(e.skills),
            "experienceYears": e.experience_years,
        }
        for e in employees
    ]


def distribution_payload(employees: list[RankedEmployee]) -> list[dict]:
    return [
        {"id": e.id, "name": e.name, "rank": e.rank, "skills": list(e.skills)}
        for e in employees
    ]


# -------------------------
# Ranking Merge
# -------------------------
def sort_by_rank(employees: list[RankedEmployee]) -> list[RankedEmployee]:
    # sorted() is stable, so ties keep roster order
    return sorted(employees, key=lambda e: e.rank, reverse=True)


def merge_rankings(
    employees: list[AnalyzedEmployee],
    entries: list[RankingEntry],
) -> list[RankedEmployee]:
    """
    Total merge of roster x ranking response -> ranked roster.

    Every roster entry appears exactly once in the result. The first response
    entry with a matching id wins; ids the model skipped get the unranked
    defaults; ids the model invented are ignored.
    """
    by_id = {}
    for entry in entries:
        by_id.setdefault(entry.id, entry)

    ranked = []
    for employee in employees:
        entry = by_id.get(employee.id)
        if entry is None:
            ranked.append(employee.promote(UNRANKED_RANK, UNRANKED_JUSTIFICATION))
        else:
            ranked.append(employee.promote(entry.rank, entry.justification))

    return sort_by_rank(ranked)


# -------------------------
# Task Input
# -------------------------
def parse_task_list(tasks_text: str) -> list[str]:
    """One task per line; blank lines are dropped."""
    return [line for line in (tasks_text or "").split("\n") if line.strip()]
