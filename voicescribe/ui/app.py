"""
VoiceScribe Streamlit UI main entry point.

Run with: ``streamlit run voicescribe/ui/app.py``
"""

# ---------------------------------------------------------------------------
# Ensure project root is on sys.path so ``from voicescribe.xxx`` imports work.
# Streamlit replaces sys.path[0] with the script directory (voicescribe/ui/),
# which removes the project root needed for absolute imports.
# ---------------------------------------------------------------------------
import sys  # noqa: E402
from pathlib import Path  # noqa: E402

_project_root = str(Path(__file__).resolve().parent.parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

import streamlit as st  # noqa: E402

from voicescribe.core.config import get_settings  # noqa: E402
from voicescribe.ui.components.recorder import render_recorder  # noqa: E402

# ---------------------------------------------------------------------------
# Page config (must be first Streamlit call)
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="VoiceScribe",
    page_icon="\U0001f399️",
    layout="centered",
)

# ---------------------------------------------------------------------------
# Session state defaults
# ---------------------------------------------------------------------------
if "api_base_url" not in st.session_state:
    st.session_state.api_base_url = get_settings().api_base_url

# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
with st.sidebar:
    st.session_state.api_base_url = st.text_input(
        "Gateway URL",
        value=st.session_state.api_base_url,
    )

st.title("Voice Transcription App")
st.caption("Record a clip, then transcribe it with Whisper.")
render_recorder()
