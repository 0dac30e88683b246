import io
from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.messages import AIMessage
from PyPDF2 import PdfWriter

from employee_sorter.models import AnalyzedEmployee


@pytest.fixture(autouse=True)
def groq_key(monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "test-key")


def build_pdf(page_widths, password=None):
    """Blank pages, one per width (points), 200pt tall."""
    writer = PdfWriter()
    for width in page_widths:
        writer.add_blank_page(width=width, height=200)
    if password:
        writer.encrypt(password)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


@pytest.fixture
def three_page_pdf():
    return build_pdf([100, 200, 300])


@pytest.fixture
def encrypted_pdf():
    return build_pdf([200, 200], password="secret")


def fake_llm(content=None, error=None):
    """Stands in for ChatGroq: bind() returns itself, ainvoke() returns an AIMessage."""
    llm = MagicMock()
    if error is not None:
        llm.ainvoke = AsyncMock(side_effect=error)
    else:
        llm.ainvoke = AsyncMock(return_value=AIMessage(content=content))
    llm.bind.return_value = llm
    return llm


def analyzed(employee_id, name, skills=("Python",), years=3, summary="Engineer"):
    return AnalyzedEmployee(
        id=employee_id,
        name=name,
        summary=summary,
        skills=list(skills),
        experience_years=years,
    )


def ranked(employee_id, name, rank, skills=("Python",), justification="Good fit"):
    return analyzed(employee_id, name, skills=skills).promote(rank, justification)

