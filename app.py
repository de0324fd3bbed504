import asyncio
import logging
from typing import Optional

import streamlit as st

from toxicity_checker.config import load_settings, resolve_factory, setup_logging
from toxicity_checker.presentation import (
    PLACEHOLDER,
    TITLE,
    button_label,
    result_rows,
    results_html,
    status_html,
    status_text,
)
from toxicity_checker.styles import stylesheet
from toxicity_checker.view import AnalysisView, Phase

settings = load_settings()
setup_logging(settings)
logger = logging.getLogger("toxicity_checker.app")

st.set_page_config(page_title=TITLE, page_icon="🧪", layout="centered")
st.markdown(stylesheet(), unsafe_allow_html=True)


# =====================
# 1) MODEL + VIEW
# =====================
@st.cache_resource(show_spinner=False)
def get_provider(factory_path: str, model_id: str, device: str, labels, max_length: int):
    factory = resolve_factory(factory_path)
    return factory(model_id, device=device, labels=labels, max_length=max_length)


def get_view() -> AnalysisView:
    # one view per browser session, so re-runs never mount twice
    if "analysis_view" not in st.session_state:
        provider = get_provider(
            settings.provider_factory,
            settings.model_id,
            settings.device,
            settings.labels,
            settings.max_length,
        )
        st.session_state.analysis_view = AnalysisView(provider, settings.threshold)
        logger.info("New session view (model=%s, threshold=%s)", settings.model_id, settings.threshold)
    return st.session_state.analysis_view


def request_analysis() -> None:
    st.session_state.analysis_requested = True


# =====================
# 2) RENDER
# =====================
def render(view: AnalysisView) -> None:
    state = view.state
    st.markdown(f"<h2 class='tc-title'>{TITLE}</h2>", unsafe_allow_html=True)
    st.text_area(
        "Text",
        key="input_text",
        height=120,
        placeholder=PLACEHOLDER,
        label_visibility="collapsed",
    )
    st.button(
        button_label(state),
        key="analyze",
        type="primary",
        disabled=not view.can_analyze(),
        on_click=request_analysis,
    )

    message = status_text(state)
    if message:
        st.markdown(status_html(message), unsafe_allow_html=True)

    if state.predictions:
        rows = result_rows(state.predictions, view.threshold)
        st.markdown(results_html(rows), unsafe_allow_html=True)


async def run_page(view: AnalysisView) -> bool:
    """Render the page, driving at most one pending model call.

    Returns True when a call finished and the page should be redrawn.
    """
    view.set_text(st.session_state.get("input_text", ""))

    pending: Optional[asyncio.Task] = None
    spinner_text = ""
    if view.state.phase is Phase.INITIAL:
        pending = asyncio.create_task(view.mount())
        spinner_text = "Loading model..."
    elif st.session_state.pop("analysis_requested", False) and view.can_analyze():
        pending = asyncio.create_task(view.analyze())
        spinner_text = "Classifying..."

    if pending is None:
        render(view)
        return False

    # let the task reach its first await so the page shows the busy state
    await asyncio.sleep(0)
    try:
        render(view)
    except BaseException:
        # a rerun or stop raised mid-render must not cancel the model call
        await pending
        raise
    with st.spinner(spinner_text):
        await pending
    return True


view = get_view()
if asyncio.run(run_page(view)):
    st.rerun()
