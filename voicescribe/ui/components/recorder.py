"""
Recorder component: renders the ``RecorderSession`` state machine.

The browser's ``st.audio_input`` widget performs capture; the finished clip
is loaded into the session, previewed, and transcribed on demand.
"""

import logging

import streamlit as st

from voicescribe.core.models import RecorderState
from voicescribe.ui.api_client import get_api_client
from voicescribe.ui.session import RecorderSession

logger = logging.getLogger(__name__)


def _get_session() -> RecorderSession:
    """Return the per-browser-session recorder, creating it on first use."""
    client = get_api_client(st.session_state.api_base_url)
    session = st.session_state.get("recorder")
    if session is None or st.session_state.get("_recorder_base_url") != st.session_state.api_base_url:
        session = RecorderSession(client)
        st.session_state.recorder = session
        st.session_state._recorder_base_url = st.session_state.api_base_url
    return session


def _sync_captured_audio(session: RecorderSession) -> None:
    """Load a newly captured browser clip into the session exactly once."""
    audio = st.audio_input("Record audio")
    if audio is None:
        return
    if audio.file_id == st.session_state.get("_loaded_audio_id"):
        return
    session.load_recording(audio.getvalue(), audio.type or "audio/wav", source_name=audio.name)
    st.session_state._loaded_audio_id = audio.file_id


def _transcribe(session: RecorderSession) -> None:
    indicator = st.empty()

    def _show_retry(retry: int, max_attempts: int) -> None:
        indicator.info(f"Retry attempt {retry}/{max_attempts}...")

    with st.spinner("Transcribing..."):
        session.transcribe(on_retry=_show_retry)
    indicator.empty()


def render_recorder() -> None:
    """Render the full recording UI based on current session state."""
    session = _get_session()

    if session.error:
        st.error(session.error)

    _sync_captured_audio(session)

    recording = session.recording
    if recording is not None:
        st.audio(recording.data, format=recording.mime_type)
        if recording.size == 0:
            st.warning("The recording is empty; the transcription will likely fail.")
        if st.button("Transcribe", disabled=session.state == RecorderState.transcribing):
            _transcribe(session)
            st.rerun()

    if session.transcription:
        st.subheader("Transcription")
        st.code(session.transcription, language=None)
        artifact = session.download()
        if artifact is not None:
            st.download_button(
                "Download Transcription",
                data=artifact.data,
                file_name=artifact.filename,
                mime=artifact.mime_type,
            )

    if st.button("Test Connection"):
        st.info(get_api_client(st.session_state.api_base_url).test_connection())
