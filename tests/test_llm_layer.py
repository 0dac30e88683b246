import json

import pytest
from langchain_core.messages import HumanMessage

from conftest import analyzed, fake_llm, ranked
from employee_sorter import llm_layer
from employee_sorter.errors import AnalysisFailed, DistributionFailed, MissingCredential, RankingFailed
from employee_sorter.llm_layer import analyze_resume, distribute_tasks, rank_employees
from employee_sorter.models import PageImage


PAGES = [PageImage(mime_type="image/jpeg", data="AAAA"), PageImage(mime_type="image/jpeg", data="BBBB")]


# -------------------------
# Resume analysis
# -------------------------
@pytest.mark.asyncio
async def test_analyze_resume_parses_schema():
    llm = fake_llm(json.dumps({"summary": "Backend dev", "skills": ["Python", "SQL"], "experienceYears": 4.5}))

    result = await analyze_resume(PAGES, llm=llm)

    assert result.summary == "Backend dev"
    assert result.skills == ["Python", "SQL"]
    assert result.experience_years == 4.5
    llm.bind.assert_called_once_with(response_format={"type": "json_object"})


@pytest.mark.asyncio
async def test_analyze_resume_sends_every_page_then_instruction():
    llm = fake_llm(json.dumps({"summary": "s", "skills": [], "experienceYears": 0}))

    await analyze_resume(PAGES, llm=llm)

    (messages,), _ = llm.ainvoke.call_args
    assert len(messages) == 1 and isinstance(messages[0], HumanMessage)
    parts = messages[0].content
    assert [p["type"] for p in parts] == ["image_url", "image_url", "text"]
    assert parts[0]["image_url"]["url"] == "data:image/jpeg;base64,AAAA"
    assert parts[1]["image_url"]["url"] == "data:image/jpeg;base64,BBBB"
    assert "experienceYears" in parts[2]["text"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "content",
    [
        "I could not read that resume.",
        json.dumps({"summary": "s", "skills": ["x"]}),
        json.dumps({"summary": "s", "skills": "Python", "experienceYears": 2}),
        json.dumps({"summary": "s", "skills": [], "experienceYears": -1}),
    ],
)
async def test_analyze_resume_bad_output_is_analysis_failed(content):
    with pytest.raises(AnalysisFailed):
        await analyze_resume(PAGES, llm=fake_llm(content))


@pytest.mark.asyncio
async def test_analyze_resume_transport_error_is_analysis_failed():
    with pytest.raises(AnalysisFailed) as exc_info:
        await analyze_resume(PAGES, llm=fake_llm(error=ConnectionError("boom")))

    assert isinstance(exc_info.value.__cause__, ConnectionError)


@pytest.mark.asyncio
async def test_analyze_resume_rejects_too_many_pages_without_calling_model(monkeypatch):
    monkeypatch.setattr(llm_layer, "MAX_ANALYSIS_PAGES", 1)
    llm = fake_llm(json.dumps({"summary": "s", "skills": [], "experienceYears": 0}))

    with pytest.raises(AnalysisFailed) as exc_info:
        await analyze_resume(PAGES, llm=llm)

    assert "2 pages" in exc_info.value.message
    llm.ainvoke.assert_not_called()


def test_default_page_limit_matches_groq_vision():
    assert llm_layer.MAX_ANALYSIS_PAGES == 5


# -------------------------
# Ranking
# -------------------------
@pytest.mark.asyncio
async def test_rank_employees_example():
    roster = [analyzed("a", "Al", skills=["Go"], years=5)]
    llm = fake_llm(json.dumps({"rankings": [{"id": "a", "rank": 80, "justification": "Strong"}]}))

    result = await rank_employees(roster, llm=llm)

    assert [(e.id, e.rank, e.justification) for e in result] == [("a", 80, "Strong")]
    llm.bind.assert_called_once_with(response_format={"type": "json_object"})
    prompt = llm.ainvoke.call_args.args[0]
    assert '"experienceYears": 5' in prompt
    assert '"id": "a"' in prompt
    assert '"rankings"' in prompt


@pytest.mark.asyncio
async def test_rank_employees_accepts_bare_array():
    llm = fake_llm(json.dumps([{"id": "a", "rank": 80, "justification": "Strong"}]))

    result = await rank_employees([analyzed("a", "Al")], llm=llm)

    assert result[0].rank == 80


@pytest.mark.asyncio
async def test_rank_employees_fills_missing_and_sorts():
    roster = [analyzed("a", "Al"), analyzed("b", "Bo"), analyzed("c", "Cy")]
    llm = fake_llm(json.dumps({"rankings": [
        {"id": "a", "rank": 20, "justification": "Junior"},
        {"id": "c", "rank": 90, "justification": "Senior"},
    ]}))

    result = await rank_employees(roster, llm=llm)

    assert [e.id for e in result] == ["c", "a", "b"]
    assert (result[-1].rank, result[-1].justification) == (0, "Not ranked")


@pytest.mark.asyncio
async def test_rank_employees_empty_roster_skips_call():
    llm = fake_llm("[]")

    assert await rank_employees([], llm=llm) == []
    llm.ainvoke.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "content",
    [
        "not json",
        json.dumps({"id": "a", "rank": 1, "justification": ""}),
        json.dumps({"rankings": "a"}),
        json.dumps({"rankings": [{"id": "a", "rank": "high"}]}),
    ],
)
async def test_rank_employees_bad_output_is_ranking_failed(content):
    with pytest.raises(RankingFailed):
        await rank_employees([analyzed("a", "Al")], llm=fake_llm(content))


@pytest.mark.asyncio
async def test_rank_employees_transport_error_is_ranking_failed():
    with pytest.raises(RankingFailed):
        await rank_employees([analyzed("a", "Al")], llm=fake_llm(error=TimeoutError()))


# -------------------------
# Task distribution
# -------------------------
@pytest.mark.asyncio
async def test_distribute_tasks_accepts_partial_coverage():
    employees = [ranked("a", "Al", 80)]
    llm = fake_llm(json.dumps({"assignments": [{"employeeId": "a", "tasks": ["Write report"]}]}))

    result = await distribute_tasks(employees, ["Write report", "Fix bug"], llm=llm)

    llm.bind.assert_called_once_with(response_format={"type": "json_object"})

    assert len(result) == 1
    assert result[0].employee_id == "a"
    assert result[0].tasks == ["Write report"]
    prompt = llm.ainvoke.call_args.args[0]
    assert '["Write report", "Fix bug"]' in prompt
    assert '"rank": 80' in prompt


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "content",
    ["nope", json.dumps({"tasks": ["Fix bug"]}), json.dumps({"assignments": [{"employeeId": "a"}]})],
)
async def test_distribute_tasks_bad_output_is_distribution_failed(content):
    with pytest.raises(DistributionFailed):
        await distribute_tasks([ranked("a", "Al", 80)], ["Fix bug"], llm=fake_llm(content))


@pytest.mark.asyncio
async def test_distribute_tasks_transport_error_is_distribution_failed():
    with pytest.raises(DistributionFailed):
        await distribute_tasks([ranked("a", "Al", 80)], ["Fix bug"], llm=fake_llm(error=RuntimeError("503")))


# -------------------------
# Client construction
# -------------------------
def test_get_llm_requires_credential(monkeypatch):
    monkeypatch.delenv("GROQ_API_KEY", raising=False)
    monkeypatch.setattr("employee_sorter.config.GROQ_API_KEY", None)
    llm_layer.get_llm.cache_clear()

    with pytest.raises(MissingCredential):
        llm_layer.get_llm("some-model")
