"""PCM conversion helpers for the live audio wire format.

Outbound audio is 16-bit signed little-endian mono, base64-encoded and tagged
``audio/pcm;rate=<rate>``. Inbound model audio uses the same sample format at
24 kHz.
"""

import base64
import math
import logging
from typing import Union

import numpy as np
from scipy.signal import resample_poly

from ..models.audio import PcmBlob

logger = logging.getLogger(__name__)


def clamp(samples: np.ndarray) -> np.ndarray:
    """Clamp float samples to the normalized range [-1, 1]."""
    return np.clip(np.asarray(samples, dtype=np.float32), -1.0, 1.0)


def float_to_pcm16(samples: np.ndarray) -> np.ndarray:
    """Convert float samples to int16 without wraparound.

    Negative samples scale by 32768 and positive ones by 32767 so both ends of
    the clamped range land exactly on the int16 limits.
    """
    clamped = clamp(np.nan_to_num(samples)).astype(np.float64)
    scaled = np.where(clamped < 0, clamped * 32768.0, clamped * 32767.0)
    return scaled.astype(np.int16)


def pcm16_to_float(data: bytes) -> np.ndarray:
    """Decode pcm16le bytes into float32 samples in [-1, 1)."""
    if len(data) % 2:
        raise ValueError(f"PCM16 payload has odd length: {len(data)} bytes")
    return np.frombuffer(data, dtype='<i2').astype(np.float32) / 32768.0


def encode_frame(samples: np.ndarray, sample_rate: int = 16000) -> PcmBlob:
    """Clamp, convert and base64-encode one captured frame."""
    pcm = float_to_pcm16(samples).astype('<i2', copy=False)
    return PcmBlob(
        data=base64.b64encode(pcm.tobytes()).decode('ascii'),
        mime_type=f"audio/pcm;rate={sample_rate}",
    )


def decode_chunk(data: Union[bytes, str]) -> np.ndarray:
    """Decode an inbound audio chunk, raw or base64, into float samples."""
    if isinstance(data, str):
        data = base64.b64decode(data, validate=True)
    return pcm16_to_float(data)


def resample(samples: np.ndarray, src_rate: int, dst_rate: int) -> np.ndarray:
    """Resample mono float samples with a polyphase filter."""
    if src_rate == dst_rate or samples.size == 0:
        return samples.astype(np.float32, copy=False)
    g = math.gcd(src_rate, dst_rate)
    up, down = dst_rate // g, src_rate // g
    return resample_poly(samples, up, down).astype(np.float32)
