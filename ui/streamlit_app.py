# ============================================
# STREAMLIT FRONTEND – AI EMPLOYEE SORTER
# (Roster + Ranking + Daily Task Distribution)
# ============================================

# ---------- FIX PYTHON PATH ----------
import sys
import os

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# ---------- STANDARD IMPORTS ----------
import asyncio
import logging
import streamlit as st

# ---------- PROJECT IMPORTS ----------
from employee_sorter.config import require_api_key
from employee_sorter.errors import MissingCredential
from employee_sorter.frontend_layer import (
    add_button_label,
    assignment_heading,
    assignment_lines,
    distribute_button_label,
    employee_card,
    employee_card_html,
    rank_button_label,
)
from employee_sorter.models import ResumeUpload
from employee_sorter.pdf_layer import page_count
from employee_sorter.state import ANALYZING, DISTRIBUTING, RANKING, SessionState

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

st.set_page_config(
    page_title="AI Employee Sorter",
    page_icon="🧠",
    layout="wide",
    initial_sidebar_state="collapsed"
)

# ============================================
# STARTUP: CREDENTIAL CHECK (fatal)
# ============================================
try:
    require_api_key()
except MissingCredential as e:
    st.error(f"❌ {e.message}")
    st.stop()

st.markdown("""
<style>
    .roster-card {
        background: rgba(15, 23, 42, 0.6);
        border: 1px solid rgba(51, 65, 85, 0.8);
        border-radius: 12px;
        padding: 16px;
        margin-bottom: 14px;
    }
    .roster-card .exp {
        font-size: 0.85rem;
        background: #334155;
        color: #cbd5e1;
        padding: 2px 8px;
        border-radius: 4px;
        margin-left: 10px;
    }
    .roster-card .quote { color: #94a3b8; font-style: italic; margin-top: 8px; }
    .roster-card .rank { float: right; font-size: 1.6rem; font-weight: 800; color: #a78bfa; }
    .skill-chip {
        display: inline-block;
        background: rgba(139, 92, 246, 0.15);
        color: #c4b5fd;
        padding: 2px 10px;
        border-radius: 50px;
        margin: 6px 6px 0 0;
        font-size: 0.8rem;
    }
</style>
""", unsafe_allow_html=True)

# ============================================
# SESSION STATE
# ============================================
if "sorter" not in st.session_state:
    st.session_state["sorter"] = SessionState()
    st.session_state["form_nonce"] = 0
    st.session_state["upload_nonce"] = 0

sorter: SessionState = st.session_state["sorter"]


def name_key():
    return f"employee_name_{st.session_state['form_nonce']}"


def upload_key():
    return f"resume_upload_{st.session_state['form_nonce']}_{st.session_state['upload_nonce']}"


def on_name_change():
    sorter.set_name(st.session_state.get(name_key(), ""))


def on_resume_change():
    file = st.session_state.get(upload_key())
    if file is None:
        sorter.select_resume(None)
        return
    accepted = sorter.select_resume(ResumeUpload(filename=file.name, mime_type=file.type or "", data=file.getvalue()))
    if not accepted:
        # Reset the uploader widget so the rejected file disappears
        st.session_state["upload_nonce"] += 1


st.markdown("## 🧠 AI Employee Sorter")

# ============================================
# NOTIFICATION (self-clears after a few seconds)
# ============================================
note = sorter.notification()
if note:
    col_msg, col_close = st.columns([12, 1])
    with col_msg:
        st.error(f"❌ {note.message}")
    with col_close:
        if st.button("✖", key="dismiss_notification"):
            sorter.dismiss_notification()
            st.rerun()

col_left, col_right = st.columns([1, 1], gap="large")

# ============================================
# ADD EMPLOYEE + ROSTER
# ============================================
with col_left:
    st.markdown("### 👤 Add New Employee")
    st.text_input(
        "Employee Name",
        key=name_key(),
        placeholder="Employee Name",
        on_change=on_name_change,
        disabled=sorter.busy[ANALYZING],
    )
    st.file_uploader(
        "Upload Resume (PDF)",
        key=upload_key(),
        on_change=on_resume_change,
        disabled=sorter.busy[ANALYZING],
    )
    if sorter.resume is not None:
        pages = page_count(sorter.resume.data)
        st.caption(f"📄 {sorter.resume.filename}" + (f" · {pages} page(s)" if pages else ""))

    if st.button(
        add_button_label(sorter.busy[ANALYZING]),
        key="add_employee_btn",
        disabled=not sorter.can_add_employee(name=st.session_state.get(name_key(), "")),
        use_container_width=True,
    ):
        sorter.set_name(st.session_state.get(name_key(), ""))
        with st.spinner("📄 Reading resume & 🧠 analyzing..."):
            added = asyncio.run(sorter.add_employee())
        if added:
            # Fresh widgets: clears the name field and the uploader
            st.session_state["form_nonce"] += 1
        st.rerun()

    st.markdown("### 📋 Employee Roster")
    if st.button(
        rank_button_label(sorter.busy[RANKING], sorter.is_ranked),
        key="rank_btn",
        disabled=not sorter.employees or sorter.busy[RANKING],
    ):
        with st.spinner("🧠 AI ranking..."):
            asyncio.run(sorter.rank())
        st.rerun()

    roster = sorter.display_roster()
    if not roster:
        st.info("Add employees via PDF to get started.")
    for employee in roster:
        st.markdown(employee_card_html(employee_card(employee)), unsafe_allow_html=True)

# ============================================
# DAILY TASK DISTRIBUTION
# ============================================
with col_right:
    st.markdown("### 🪄 Daily Task Distribution")
    tasks_text = st.text_area(
        "Tasks",
        height=180,
        placeholder="Enter daily tasks, one per line...",
        disabled=not sorter.is_ranked,
        label_visibility="collapsed",
    )
    if st.button(
        distribute_button_label(sorter.busy[DISTRIBUTING]),
        key="distribute_btn",
        disabled=not sorter.is_ranked or not tasks_text.strip() or sorter.busy[DISTRIBUTING],
        use_container_width=True,
    ):
        with st.spinner("🎯 Assigning tasks..."):
            asyncio.run(sorter.distribute(tasks_text))
        st.rerun()

    if sorter.assignments:
        st.markdown("#### ✅ Assignments")
        names = sorter.employee_names()
        for assignment in sorter.assignments:
            with st.expander(f"👤 {assignment_heading(assignment, names)}", expanded=True):
                for task in assignment.tasks:
                    st.text(f"• {task}")
        st.code("\n".join(assignment_lines(sorter.assignments, names)), language=None)
