from __future__ import annotations

import streamlit as st

from futurework.auth import authorize_interactive, session_from_token
from futurework.cache_flow import analyze_industry, analyze_role
from futurework.config import STATE_KEY_CLIENT_ID
from futurework.environment import assert_runtime_compatibility
from futurework.errors import AuthRequired
from futurework.export import CSV_FILENAME, CSV_MIME, predictions_frame, predictions_to_csv
from futurework.models import CacheStatus, FlowResult, JobInput
from futurework.predictor import PredictionRequestor
from futurework.runtime import LocalState, load_settings
from futurework.sheets import SheetSession, SheetsClient
from futurework.ui_state import PENDING_KEY, PendingRequest, init_state, run_pending, submit_request


st.set_page_config(page_title="FutureWork AI", layout="wide")

DEFAULT_BULK_INDUSTRY = "Technology"


@st.cache_resource
def _services() -> tuple[LocalState, SheetsClient, PredictionRequestor, str | None]:
    settings = load_settings()
    assert_runtime_compatibility(settings)
    state = LocalState(settings.state_path)
    return state, SheetsClient(state, settings), PredictionRequestor(settings), settings.oauth_client_secret


def _render_header() -> None:
    st.title("Will AI Replace Your Job?")
    st.caption(
        "Analyze career longevity, automation risks, and discover your next best move. "
        "Data-driven predictions for the evolving workforce."
    )


def _render_connector(state: LocalState, client_secret: str | None) -> None:
    with st.sidebar:
        st.header("Google Sheets")
        session: SheetSession | None = st.session_state["sheet_session"]
        if session is not None:
            st.success("Sheets Synced")
            if st.button("Disconnect"):
                st.session_state["sheet_session"] = None
                st.rerun()
            return

        saved_client_id = state.get(STATE_KEY_CLIENT_ID) or ""
        with st.expander("Configure Google Sheets", expanded=not saved_client_id):
            st.caption("To save and cache predictions, enter a Google Cloud Client ID. It is stored locally.")
            client_id = st.text_input(
                "Client ID",
                value=saved_client_id,
                placeholder="e.g. 123456-abcdef.apps.googleusercontent.com",
            )
            if st.button("Save & Connect") and client_id.strip():
                state.set(STATE_KEY_CLIENT_ID, client_id.strip())
                st.rerun()

        if st.button("Connect Sheets", disabled=not saved_client_id):
            try:
                st.session_state["sheet_session"] = authorize_interactive(saved_client_id, client_secret)
            except AuthRequired as exc:
                st.error(str(exc))
            else:
                st.rerun()

        pasted = st.text_input("Or paste an access token", type="password")
        if pasted and st.button("Use token"):
            st.session_state["sheet_session"] = session_from_token(pasted)
            st.rerun()


def _execute(request: PendingRequest, client: SheetsClient, requestor: PredictionRequestor) -> FlowResult:
    session: SheetSession | None = st.session_state["sheet_session"]
    if request.kind == "role":
        return analyze_role(request.job_input, requestor, client, session)
    return analyze_industry(request.industry, requestor, client, session)


def _render_form() -> None:
    busy = bool(st.session_state["busy"])

    with st.form("job_input"):
        c1, c2, c3 = st.columns(3)
        with c1:
            industry = st.text_input("Industry", placeholder="e.g. Finance, Tech")
        with c2:
            country = st.text_input("Country", placeholder="e.g. USA, Germany")
        with c3:
            role = st.text_input("Job Role", placeholder="e.g. Data Analyst")
        b1, b2 = st.columns(2)
        with b1:
            analyze_clicked = st.form_submit_button("Analyze", type="primary", disabled=busy)
        with b2:
            bulk_clicked = st.form_submit_button("Top 5 at-risk roles in this industry", disabled=busy)
    st.caption("Tip: leave Role empty and use the top-5 button to see the most at-risk jobs in an industry.")

    if analyze_clicked:
        if not (industry.strip() and country.strip() and role.strip()):
            st.warning("Enter an industry, country and role.")
            return
        request = PendingRequest.for_role(JobInput(industry=industry, country=country, role=role))
    elif bulk_clicked:
        request = PendingRequest.for_industry(industry.strip() or DEFAULT_BULK_INDUSTRY)
    else:
        return
    if submit_request(st.session_state, request):
        st.rerun()


def _run_pending(client: SheetsClient, requestor: PredictionRequestor) -> None:
    if st.session_state[PENDING_KEY] is None and not st.session_state["busy"]:
        return
    with st.spinner("Analyzing..."):
        ran = run_pending(st.session_state, lambda request: _execute(request, client, requestor))
    if ran:
        # Redraw so the buttons come back enabled next to the results.
        st.rerun()


def _render_results() -> None:
    error = st.session_state["error"]
    if error:
        st.error(error)
        return

    status = st.session_state["cache_status"]
    if status == CacheStatus.HIT:
        st.success("Loaded from Google Sheet")
    elif status == CacheStatus.REFRESHED:
        st.warning("Data was outdated. Refreshed from AI & updated Sheet.")

    predictions = st.session_state["predictions"]
    if not predictions:
        return

    st.subheader("Prediction Analysis")
    st.download_button(
        "Download CSV",
        data=predictions_to_csv(predictions),
        file_name=CSV_FILENAME,
        mime=CSV_MIME,
    )
    st.dataframe(predictions_frame(predictions), use_container_width=True, hide_index=True)
    st.caption("Predictions are generated by AI and are speculative estimates for educational purposes.")


def main() -> None:
    init_state(st.session_state)
    try:
        state, client, requestor, client_secret = _services()
    except RuntimeError as exc:
        st.error(str(exc))
        st.stop()
    _render_header()
    _render_connector(state, client_secret)
    _render_form()
    _run_pending(client, requestor)
    _render_results()


main()
