"""VoiceScribe: record in the browser, transcribe through the Whisper API."""

__version__ = "0.1.0"
