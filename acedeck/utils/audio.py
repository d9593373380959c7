"""Wraps raw PCM narration in a WAV container so it can be saved and played."""

import io
import wave

NARRATION_SAMPLE_RATE = 24000
NARRATION_CHANNELS = 1
NARRATION_SAMPLE_WIDTH = 2  # 16-bit


def pcm_to_wav(
    pcm: bytes,
    sample_rate: int = NARRATION_SAMPLE_RATE,
    channels: int = NARRATION_CHANNELS,
    sample_width: int = NARRATION_SAMPLE_WIDTH,
) -> bytes:
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav:
        wav.setnchannels(channels)
        wav.setsampwidth(sample_width)
        wav.setframerate(sample_rate)
        wav.writeframes(pcm)
    return buffer.getvalue()
