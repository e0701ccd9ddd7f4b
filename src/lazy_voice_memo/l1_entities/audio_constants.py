"""Fixed audio format expected by the whisper.cpp engine."""

SAMPLE_RATE = 16000
CHANNELS = 1
SAMPLE_WIDTH = 2  # bytes, signed 16-bit PCM
INT16_SCALE = 32767.0
