"""
Streamlit Grade Sheet Editor

Teacher-facing application for opening a class grading template, entering
marks, reviewing statistics and uploading the filled sheet.
"""

import time

import streamlit as st
import pandas as pd

from gradesheet import (
    EditorSession,
    GradingApiClient,
    StreamlitStorage,
    calculate_statistics,
    calculate_term_statistics,
    class_names,
    load_config,
    load_grading_file,
    parse_student_file,
    parse_student_list,
    resolve_convention,
    sanitize_text_input,
)
from gradesheet.errors import GradeSheetError, TransportError
from gradesheet.grade_grid import GRADE_COLUMNS
from gradesheet.logging_setup import configure_logging
from gradesheet.session import EditorState
from gradesheet.template_schema import ANNUAL_FIELDS, TERM_COUNTER_FIELDS


# Page configuration
st.set_page_config(
    page_title="Grade Sheet Editor",
    page_icon="📝",
    layout="wide",
    initial_sidebar_state="expanded"
)


def init_session_state():
    """Initialize session state with default values."""
    if "config" not in st.session_state:
        st.session_state.config = load_config()
        configure_logging(st.session_state.config)

    if "user_id" not in st.session_state:
        st.session_state.user_id = ""

    if "imported_students" not in st.session_state:
        st.session_state.imported_students = []


def get_client() -> GradingApiClient:
    """Return the API client kept for this browser session."""
    api = st.session_state.config["api"]
    if "client" not in st.session_state:
        st.session_state.client = GradingApiClient(api["base_url"], api["timeout"])
    return st.session_state.client


def get_editor() -> EditorSession:
    """Rebuild the editor from the state persisted in this browser tab."""
    config = st.session_state.config
    editor = EditorSession(
        StreamlitStorage(),
        key=config["session_key"],
        text_max_length=config["text_max_length"],
    )
    editor.load()
    return editor


def render_sidebar():
    """Render the sidebar with the signed-in teacher and API settings."""
    st.sidebar.header("Teacher")
    st.session_state.user_id = st.sidebar.text_input(
        "Teacher ID",
        value=st.session_state.user_id,
        help="Used as the uploader of finalized grade sheets"
    )
    st.sidebar.caption(f"API: {st.session_state.config['api']['base_url']}")


def render_step1_template(editor: EditorSession):
    """Render Step 1: choose a class template or upload a grade sheet."""
    if editor.state != EditorState.EMPTY:
        st.header(f"Step 1: Grade Sheet ✓ ({editor.file_name})")
    else:
        st.header("Step 1: Grade Sheet")

    col1, col2 = st.columns(2)

    with col1:
        st.subheader("📂 School Template")
        class_name = st.selectbox("Class", options=class_names(), key="template_class")
        convention = resolve_convention(class_name)
        st.caption(f"Graded out of {convention.max_grade}")

        templates = []
        try:
            templates = get_client().list_templates(class_name)
        except TransportError as e:
            st.error(f"Could not list templates: {e.message}")

        if templates:
            template_file = st.selectbox("Template", options=templates, key="template_file")
            if st.button("Open Template", type="primary"):
                try:
                    content = get_client().fetch_template(class_name, template_file)
                    grid = load_grading_file(
                        content,
                        class_name,
                        text_max_length=st.session_state.config["text_max_length"],
                    )
                    editor.start(grid, template_file, class_name)
                    st.rerun()
                except GradeSheetError as e:
                    st.error(f"Error opening template: {e}")
        else:
            st.info("No templates available for this class")

    with col2:
        st.subheader("📤 Upload Grade Sheet")
        upload_class = st.selectbox("Class of the sheet", options=class_names(), key="upload_class")
        uploaded = st.file_uploader("Grade sheet (.xlsx)", type=["xlsx"], key="grade_sheet_upload")
        if uploaded is not None:
            try:
                grid = load_grading_file(
                    uploaded.getvalue(),
                    upload_class,
                    text_max_length=st.session_state.config["text_max_length"],
                )
            except GradeSheetError as e:
                st.error(f"Error reading grade sheet: {e}")
                return

            with st.expander(f"Preview ({grid.student_count} students)"):
                st.dataframe(grid.to_dataframe(), hide_index=True, use_container_width=True)

            open_col, send_col = st.columns(2)
            if open_col.button("Open Upload"):
                editor.start(grid, uploaded.name, upload_class)
                st.rerun()
            if send_col.button("Upload as is", disabled=not st.session_state.user_id):
                upload_sheet_directly(uploaded.name, uploaded.getvalue())


def refresh_uploads():
    """Reload the signed-in teacher's uploaded sheets."""
    try:
        st.session_state.uploaded_files = get_client().list_uploads(st.session_state.user_id)
    except TransportError as e:
        st.session_state.uploaded_files = []
        st.error(f"Could not list uploaded sheets: {e.message}")


def upload_sheet_directly(file_name: str, content: bytes):
    """Upload a previewed sheet without opening it in the editor."""
    user_id = st.session_state.user_id
    related_id = f"{user_id}-{int(time.time() * 1000)}"
    try:
        get_client().upload_grade_sheet(file_name, content, related_id, user_id)
    except TransportError as e:
        st.error(f"Upload failed: {e.message}")
        return
    st.success("✓ File uploaded successfully")
    refresh_uploads()


def render_uploads():
    """Render the teacher's uploaded sheets with share and delete actions."""
    st.subheader("📁 My Uploaded Sheets")

    if not st.session_state.user_id:
        st.info("Enter your Teacher ID to see your uploaded sheets")
        return

    if "uploaded_files" not in st.session_state or st.button("Refresh", key="refresh_uploads"):
        refresh_uploads()

    files = st.session_state.uploaded_files
    if not files:
        st.caption("No uploaded files.")
        return

    for file in files:
        file_id = file.get("id")
        name = file.get("originalName") or file.get("fileName") or file_id
        col_name, col_delete = st.columns([4, 1])
        col_name.markdown(f"**{name}**")
        if col_delete.button("Delete", key=f"delete_{file_id}"):
            try:
                get_client().delete_upload(file_id)
                st.session_state.uploaded_files = [f for f in files if f.get("id") != file_id]
                st.rerun()
            except TransportError as e:
                st.error(f"Failed to delete: {e.message}")

        with st.expander("Share"):
            email = st.text_input("Recipient email", key=f"share_email_{file_id}")
            message = st.text_area("Message", key=f"share_message_{file_id}", height=80)
            if st.button("Send", key=f"share_send_{file_id}", disabled=not email):
                try:
                    get_client().share_upload(file_id, email, sanitize_text_input(message))
                    st.success("✓ File shared successfully!")
                except TransportError as e:
                    st.error(f"Failed to share: {e.message}")


def render_grade_table(editor: EditorSession):
    """Render the editable marks table and apply validated edits."""
    grid = editor.grid
    st.subheader("👥 Student Grades")

    if grid.student_count == 0:
        st.info("No student data found in this template.")
        return

    df = grid.to_dataframe()
    grade_headers = [grid.header[c] for c in GRADE_COLUMNS if c < len(grid.header)]
    placeholder = grid.convention.placeholder

    edited = st.data_editor(
        df,
        disabled=[h for h in df.columns if h not in grade_headers],
        column_config={
            h: st.column_config.TextColumn(h, help=f"Grade {placeholder}") for h in grade_headers
        },
        hide_index=True,
        use_container_width=True,
        key=f"grade_table_{editor.file_name}",
    )

    changed = False
    for row_idx in range(len(edited)):
        for col in GRADE_COLUMNS:
            value = edited.iat[row_idx, col]
            text = "" if pd.isna(value) else str(value)
            if text != grid.get_cell(row_idx + 1, col):
                changed = editor.edit_grade(row_idx + 1, col, text) or changed

    if changed:
        st.rerun()

    st.caption(f"{grid.student_count} students loaded")


def render_side_tables(editor: EditorSession):
    """Render term counters, competencies and annual statistics."""
    grid = editor.grid

    st.subheader("Statistics")
    st.caption(grid.read_field("statistics_title") or "Statistics")
    for name in TERM_COUNTER_FIELDS:
        value = st.text_input(grid.field_label(name), value=grid.read_field(name), key=f"field_{name}_{editor.file_name}", placeholder="0")
        if value != grid.read_field(name):
            editor.edit_field(name, value)

    st.subheader("Competencies")
    competencies = st.text_area(
        "Targeted term competencies",
        value=grid.read_field("competencies"),
        height=120,
        key=f"field_competencies_{editor.file_name}",
        placeholder="Enter competencies..."
    )
    if competencies != grid.read_field("competencies"):
        editor.edit_field("competencies", competencies)

    st.subheader("Annual Statistics")
    for name in ANNUAL_FIELDS:
        value = st.text_input(grid.field_label(name), value=grid.read_field(name), key=f"field_{name}_{editor.file_name}", placeholder="0")
        if value != grid.read_field(name):
            editor.edit_field(name, value)
    remarks = grid.read_field("annual_remarks")
    if remarks:
        st.caption(remarks)


def render_statistics(editor: EditorSession):
    """Render grade and term statistics for the current sheet."""
    grid = editor.grid
    stats = calculate_statistics(grid.records())
    term_stats = calculate_term_statistics(grid.term_counters())

    st.subheader("📊 Grade Statistics")
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Students graded", stats.total_students)
    c2.metric("Average", f"{stats.average_grade:.2f}")
    c3.metric("Pass rate", f"{stats.pass_rate:.1f}%")
    c4.metric("Below 10", stats.students_below_10)
    # Template sheets carry no gender column, so no boys/girls split is shown

    activities = pd.DataFrame(
        [
            {"Activity": "Courses", **vars(term_stats.courses)},
            {"Activity": "Period hours", **vars(term_stats.period_hours)},
            {"Activity": "TP/TD", **vars(term_stats.tp_td)},
        ]
    )
    st.dataframe(activities, hide_index=True, use_container_width=True)


def render_step2_editor(editor: EditorSession):
    """Render Step 2: edit the grade sheet."""
    st.header("Step 2: Grade Editor")

    if editor.state == EditorState.EMPTY:
        st.info("Open a template or upload a grade sheet in Step 1")
        return

    c1, c2, c3 = st.columns(3)
    c1.markdown(f"**Class:** {editor.class_name}")
    c2.markdown(f"**Subject:** {editor.file_name.replace('.xlsx', '')}")
    with c3:
        term = st.text_input("Term", value=editor.term, placeholder="1/2/3", key=f"editor_term_{editor.file_name}")
        if term != editor.term:
            editor.set_term(term)

    col_main, col_side = st.columns([3, 1])
    with col_main:
        render_grade_table(editor)
    with col_side:
        render_side_tables(editor)

    st.divider()
    render_statistics(editor)

    st.divider()
    col1, col2 = st.columns(2)
    with col1:
        if st.button("🚀 Finalize & Upload", type="primary", use_container_width=True):
            with st.spinner("Please wait while uploading..."):
                result = editor.finalize(get_client(), st.session_state.user_id)
            if result.success:
                st.success(f"✓ {result.message}")
                refresh_uploads()
            else:
                st.error(f"Upload failed: {result.message}")
    with col2:
        if st.button("Cancel", use_container_width=True):
            editor.cancel()
            st.rerun()


def render_step3_students():
    """Render Step 3: import a student list into a grade report."""
    st.header("Step 3: Student List Import")

    tab1, tab2 = st.tabs(["📝 Paste List", "📁 Upload File"])

    with tab1:
        students_text = st.text_area(
            "One student per line",
            height=200,
            placeholder="Jane Doe, 2267, F\nJohn Smith (2268)\n...",
            key="students_text"
        )
        if students_text:
            st.session_state.imported_students = parse_student_list(students_text)

    with tab2:
        uploaded_file = st.file_uploader(
            "Upload student list (CSV, TXT or Excel)",
            type=["csv", "txt", "xlsx"],
            key="students_file"
        )
        if uploaded_file is not None:
            try:
                st.session_state.imported_students = parse_student_file(uploaded_file.name, uploaded_file.getvalue())
            except GradeSheetError as e:
                st.error(str(e))

    students = st.session_state.imported_students
    if not students:
        st.info("Paste or upload a student list to preview it")
        return

    st.success(f"✓ {len(students)} students parsed")
    preview = pd.DataFrame(
        [
            {"Name": s.name, "Matricule": s.matricule or "", "Gender": s.gender.value, "Remarks": s.remarks or ""}
            for s in students
        ]
    )
    edited = st.data_editor(
        preview,
        disabled=["Name", "Matricule", "Gender"],
        hide_index=True,
        use_container_width=True,
        key="students_preview",
    )
    for student, remark in zip(students, edited["Remarks"]):
        text = "" if pd.isna(remark) else sanitize_text_input(str(remark))
        student.remarks = text or None

    report_id = st.text_input("Grade report ID", key="report_id")
    if st.button("Add to Grade Report", disabled=not report_id):
        try:
            created = get_client().add_student_grades(report_id, students)
            st.success(f"✓ {created} students added")
        except TransportError as e:
            st.error(f"Failed to add students: {e.message}")


def main():
    """Main application entry point."""
    init_session_state()

    st.title("📝 Grade Sheet Editor")

    render_sidebar()

    editor = get_editor()

    render_step1_template(editor)

    render_uploads()

    st.divider()

    render_step2_editor(editor)

    st.divider()

    render_step3_students()


if __name__ == "__main__":
    main()
