from conftest import analyzed, ranked
from employee_sorter.frontend_layer import (
    add_button_label,
    assignment_lines,
    distribute_button_label,
    employee_card,
    employee_card_html,
    rank_button_label,
)
from employee_sorter.models import TaskAssignment


def test_assignment_lines_example():
    assignments = [TaskAssignment(employee_id="a", tasks=["Write report"])]

    assert assignment_lines(assignments, {"a": "Al"}) == ["Al: Write report"]


def test_assignment_lines_unknown_employee():
    assignments = [TaskAssignment(employeeId="ghost", tasks=["Fix bug", "Deploy"])]

    assert assignment_lines(assignments, {"a": "Al"}) == [
        "Unknown Employee: Fix bug",
        "Unknown Employee: Deploy",
    ]


def test_card_for_analyzed_employee_shows_summary():
    card = employee_card(analyzed("a", "Al", skills=["Go"], years=5, summary="Backend dev"))

    assert card["rank"] is None
    assert card["quote"] == '"Backend dev"'
    assert card["experience"] == "5 yrs exp"
    assert card["skills"] == ["Go"]


def test_card_for_ranked_employee_shows_rank_and_justification():
    card = employee_card(ranked("a", "Al", 80, justification="Strong"))

    assert card["rank"] == "#80"
    assert card["quote"] == '"Strong"'



def test_card_html_escapes_markup_in_every_field():
    payload = "<img src=x onerror=alert(1)>"
    employee = ranked("a", payload, 80, skills=[payload], justification=payload)

    html = employee_card_html(employee_card(employee))

    assert "<img" not in html
    assert html.count("&lt;img src=x onerror=alert(1)&gt;") == 3
    assert '<span class="rank">#80</span>' in html


def test_card_html_for_analyzed_employee_has_no_rank_badge():
    html = employee_card_html(employee_card(analyzed("a", "Al & Bo", summary="C++ <dev>")))

    assert 'class="rank"' not in html
    assert "<strong>Al &amp; Bo</strong>" in html
    assert '"C++ &lt;dev&gt;"' in html


def test_fractional_experience():
    assert employee_card(analyzed("a", "Al", years=2.5))["experience"] == "2.5 yrs exp"


def test_button_labels():
    assert add_button_label(False) == "Add & Analyze Employee"
    assert add_button_label(True) == "Analyzing Resume..."
    assert rank_button_label(False, False) == "Analyze & Rank All"
    assert rank_button_label(False, True) == "Re-Analyze Ranks"
    assert rank_button_label(True, True) == "Analyzing..."
    assert distribute_button_label(False) == "Distribute Tasks with AI"
    assert distribute_button_label(True) == "Assigning..."
