"""lazy-voice-memo -- offline voice memo transcription and LLM enhancement."""

__version__ = '0.3.0'
