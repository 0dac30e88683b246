from html import escape

from employee_sorter.models import Employee, TaskAssignment

UNKNOWN_EMPLOYEE = "Unknown Employee"


def add_button_label(is_analyzing: bool):
    return "Analyzing Resume..." if is_analyzing else "Add & Analyze Employee"


def rank_button_label(is_ranking: bool, is_ranked: bool):
    if is_ranking:
        return "Analyzing..."
    return "Re-Analyze Ranks" if is_ranked else "Analyze & Rank All"


def distribute_button_label(is_distributing: bool):
    return "Assigning..." if is_distributing else "Distribute Tasks with AI"


def format_experience(experience_years: float):
    years = int(experience_years) if float(experience_years).is_integer() else experience_years
    return f"{years} yrs exp"


def employee_card(employee: Employee):
    """
    Text for one roster card. Ranked employees show their rank and the
    model's justification, analyzed ones their resume summary.
    """
    card = {
        "name": employee.name,
        "experience": format_experience(employee.experience_years),
        "skills": list(employee.skills),
        "rank": None,
        "quote": f'"{employee.summary}"',
    }
    if employee.kind == "ranked":
        card["rank"] = f"#{employee.rank}"
        card["quote"] = f'"{employee.justification}"'
    return card


def employee_card_html(card: dict):
    """Markup for one roster card. Every model- or user-supplied field is escaped."""
    rank_html = f'<span class="rank">{escape(card["rank"])}</span>' if card["rank"] else ""
    skills_html = "".join(f'<span class="skill-chip">{escape(skill)}</span>' for skill in card["skills"])
    return f"""<div class="roster-card">
{rank_html}
<strong>{escape(card["name"])}</strong><span class="exp">{escape(card["experience"])}</span>
<div class="quote">{escape(card["quote"], quote=False)}</div>
<div>{skills_html}</div>
</div>"""


def assignment_heading(assignment: TaskAssignment, employee_names: dict[str, str]):
    return employee_names.get(assignment.employee_id) or UNKNOWN_EMPLOYEE


def assignment_lines(assignments: list[TaskAssignment], employee_names: dict[str, str]):
    """Flat "Name: task" lines, one per assigned task."""
    lines = []
    for assignment in assignments:
        heading = assignment_heading(assignment, employee_names)
        for task in assignment.tasks:
            lines.append(f"{heading}: {task}")
    return lines
