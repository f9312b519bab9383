"""
ui/theme.py

FIEC +IA shared theme helper.
Call apply_fiec_theme() immediately after st.set_page_config() in any page
to inject brand styling and render the consistent header bar.

Brand tokens:
    primary blue:  #2563EB
    light gray:    #F3F4F6
    mid gray:      #E5E7EB
    muted text:    #4B5563
    success green: #16A34A
"""

from __future__ import annotations

import streamlit as st

# ---------------------------------------------------------------------------
# Brand tokens
# ---------------------------------------------------------------------------
_PRIMARY_BLUE  = "#2563EB"
_LIGHT_GRAY    = "#F3F4F6"
_MID_GRAY      = "#E5E7EB"
_MUTED_TEXT    = "#4B5563"
_SUCCESS_GREEN = "#16A34A"

# ---------------------------------------------------------------------------
# CSS: injected once per page render.
# Double braces {{ }} produce literal CSS braces in the f-string.
# ---------------------------------------------------------------------------
_CSS = f"""
<style>
.block-container {{
    padding-top: 0.75rem !important;
    padding-bottom: 2rem !important;
}}

#MainMenu {{ visibility: hidden; }}
footer {{ visibility: hidden; }}
header {{ visibility: hidden; }}

.stApp {{
    background-color: {_LIGHT_GRAY};
}}

/* Module cards */
div[data-testid="stVerticalBlockBorderWrapper"] {{
    background-color: white;
    border-radius: 12px;
}}

/* Progress bar */
div[data-testid="stProgress"] > div > div > div > div {{
    background-color: {_PRIMARY_BLUE};
}}

.stButton > button, .stLinkButton > a {{
    border-radius: 10px !important;
}}
.stButton > button[kind="primary"] {{
    background-color: {_PRIMARY_BLUE} !important;
    color: white !important;
    border: none !important;
}}

.fiec-locked {{ color: #9CA3AF; }}
.fiec-completed {{ color: {_SUCCESS_GREEN}; font-weight: 700; }}

hr {{
    border: none !important;
    border-top: 1px solid {_MID_GRAY} !important;
    margin: 1rem 0 !important;
}}
</style>
"""


def apply_fiec_theme(title: str, subtitle: str | None = None) -> None:
    """Inject FIEC +IA brand CSS and render the shared top bar.

    Must be called immediately after st.set_page_config() in each page.
    """
    st.markdown(_CSS, unsafe_allow_html=True)

    subtitle_html = (
        f"<div style='color:{_MUTED_TEXT}; font-size:0.9rem; margin-top:0.15rem;'>{subtitle}</div>"
        if subtitle else
        ""
    )

    st.markdown(
        f"""
        <div style="
            background: {_MID_GRAY};
            border-bottom: 3px solid {_PRIMARY_BLUE};
            padding: 0.65rem 1.25rem;
            margin: -0.75rem -1rem 1.0rem -1rem;
            display: flex;
            align-items: center;
            gap: 1rem;
        ">
            <div style="display:flex; flex-direction:column; line-height:1.1;">
                <div style="color:{_PRIMARY_BLUE}; font-size:1.35rem; font-weight:800;">
                    {title}
                </div>
                {subtitle_html}
            </div>
        </div>
        """,
        unsafe_allow_html=True,
    )
