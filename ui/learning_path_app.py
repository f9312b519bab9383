"""
ui/learning_path_app.py

FIEC +IA Learning Path: module cards driven by the Moodle query string.

The host (Moodle) embeds this page with either a whole "course" JSON value
or flat cid/cn/csn/fo/m{i}* parameters. Decoding and unlock decisions live
in execution/; this page only renders the view and forwards entry clicks.

Run from the repository root:
    streamlit run ui/learning_path_app.py
"""

import logging
import sys
from pathlib import Path
from urllib.parse import urlencode

import streamlit as st

# ---------------------------------------------------------------------------
# sys.path bootstrap: this file lives one level below repo root (ui/).
# ---------------------------------------------------------------------------
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from execution.payload.encode_payload import encode_flat_params, encode_whole_payload  # noqa: E402
from execution.session.learning_session import LearningSession                      # noqa: E402
from ui.theme import apply_fiec_theme                                                # noqa: E402

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
PROGRAM_TITLE = "Programa de Cultura de IA - Sistema FIEC"
PROGRAM_BLURB = "16h de conteúdo gravado (online)"
CARDS_PER_ROW = 4
EM_DASH = "\u2014"

# ---------------------------------------------------------------------------
# Page config: must be the first Streamlit call in the file.
# ---------------------------------------------------------------------------
st.set_page_config(page_title="FIEC +IA", layout="wide")
apply_fiec_theme("FIEC +IA", PROGRAM_TITLE)

# ---------------------------------------------------------------------------
# Session state initialisation
# ---------------------------------------------------------------------------
if "lp_session" not in st.session_state:
    st.session_state["lp_session"] = LearningSession()
if "lp_params" not in st.session_state:
    st.session_state["lp_params"] = None  # last decoded query string

session: LearningSession = st.session_state["lp_session"]

# Re-decode only when the boundary input changed; progress is re-seeded then.
params = st.query_params.to_dict()
if params != st.session_state["lp_params"]:
    try:
        session.apply_boundary(params)
    except Exception:
        logging.exception("Unexpected error decoding learning-path parameters")
        st.error("Could not read the course data sent by Moodle.")
    st.session_state["lp_params"] = params

try:
    view = session.build_view()
except Exception:
    logging.exception("Unexpected error building the learning-path view")
    st.error("An unexpected error occurred. See console for details.")
    st.stop()

# ---------------------------------------------------------------------------
# Hero
# ---------------------------------------------------------------------------
st.title(f"Bem-vindo(a) ao seu espaço de aprendizado, {view['greeting_name']}!")
if view["course_name"]:
    st.markdown(f"Curso: **{view['course_name']}** ({view['course_shortname']})")
else:
    st.write(
        "Aqui você pode acompanhar seu progresso no Programa de Cultura de IA - Sistema FIEC."
    )

# ---------------------------------------------------------------------------
# Module cards
# ---------------------------------------------------------------------------
st.header(PROGRAM_TITLE)
st.caption(PROGRAM_BLURB)


def _render_module_card(module: dict) -> None:
    with st.container(border=True):
        if module["completed"]:
            badge = "✅"
        elif module["unlocked"]:
            badge = "🔓"
        else:
            badge = "🔒"

        st.subheader(f"{badge} {module['title']}")
        st.write(module["subtitle"])

        left, right = st.columns(2)
        left.caption(module["duration"])
        right.markdown(
            f"<span class='{'fiec-completed' if module['completed'] else ''}'>"
            f"{module['progress']}% Concluído</span>",
            unsafe_allow_html=True,
        )
        st.progress(module["progress"])

        if not module["unlocked"]:
            st.markdown("<span class='fiec-locked'>Bloqueado</span>", unsafe_allow_html=True)
            return

        if st.button("Registrar acesso", key=f"enter_{module['index']}", use_container_width=True):
            if session.enter_module(module["index"]):
                st.rerun()
        if module["linked"]:
            st.link_button("Abrir no Moodle", module["url"], use_container_width=True)


modules = view["modules"]
for row_start in range(0, len(modules), CARDS_PER_ROW):
    for column, module in zip(
        st.columns(CARDS_PER_ROW), modules[row_start:row_start + CARDS_PER_ROW]
    ):
        with column:
            _render_module_card(module)

# ---------------------------------------------------------------------------
# Bonus sections
# ---------------------------------------------------------------------------
st.divider()
st.header("Seções Adicionais")
for column, section in zip(st.columns(len(view["bonus_sections"])), view["bonus_sections"]):
    with column:
        with st.container(border=True):
            label = f"🔒 {section['name']}" if section["locked"] else section["name"]
            st.markdown(f"**{label}**")

# ---------------------------------------------------------------------------
# Sidebar: preview links for the decoded course (host integration aid)
# ---------------------------------------------------------------------------
with st.sidebar:
    st.subheader("Diagnóstico")
    st.write(f"**Origem dos dados:** {session.decode_source or EM_DASH}")
    if session.payload is not None:
        with st.expander("Links de pré-visualização"):
            st.caption("Parâmetros planos")
            st.code("?" + urlencode(encode_flat_params(session.payload)))
            st.caption("Payload JSON (course)")
            st.code("?" + urlencode(encode_whole_payload(session.payload)))
