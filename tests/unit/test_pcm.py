"""Unit tests for PCM conversion helpers."""

import base64

import numpy as np
import pytest

from nyayalive.audio.pcm import (
    clamp,
    float_to_pcm16,
    pcm16_to_float,
    encode_frame,
    decode_chunk,
    resample,
)


@pytest.mark.unit
class TestPcmConversion:

    def test_full_scale_maps_to_int16_limits(self):
        pcm = float_to_pcm16(np.array([-1.0, 0.0, 1.0], dtype=np.float32))
        assert pcm.dtype == np.int16
        assert pcm.tolist() == [-32768, 0, 32767]

    def test_out_of_range_samples_are_clamped_not_wrapped(self):
        pcm = float_to_pcm16(np.array([-3.5, -1.0001, 1.0001, 7.0], dtype=np.float32))
        assert pcm.tolist() == [-32768, -32768, 32767, 32767]

    def test_nan_becomes_silence(self):
        pcm = float_to_pcm16(np.array([np.nan, 0.5], dtype=np.float32))
        assert pcm[0] == 0
        assert pcm[1] == int(0.5 * 32767)

    def test_clamp(self):
        assert clamp(np.array([-2.0, 0.25, 2.0])).tolist() == [-1.0, 0.25, 1.0]

    def test_random_frame_stays_in_range(self):
        rng = np.random.default_rng(7)
        samples = rng.uniform(-4.0, 4.0, 4096).astype(np.float32)
        pcm = float_to_pcm16(samples)
        assert pcm.min() >= -32768
        assert pcm.max() <= 32767
        assert np.all(pcm[samples >= 1.0] == 32767)
        assert np.all(pcm[samples <= -1.0] == -32768)


@pytest.mark.unit
class TestWireFormat:

    def test_encode_frame(self):
        blob = encode_frame(np.array([0.0, 1.0, -1.0], dtype=np.float32))
        assert blob.mime_type == "audio/pcm;rate=16000"
        raw = base64.b64decode(blob.data)
        assert len(raw) == 6
        assert np.frombuffer(raw, dtype='<i2').tolist() == [0, 32767, -32768]
        assert blob.raw_bytes() == raw

    def test_encode_frame_is_little_endian(self):
        raw = encode_frame(np.array([1.0], dtype=np.float32)).raw_bytes()
        assert raw == b'\xff\x7f'

    def test_decode_raw_bytes(self):
        samples = decode_chunk(np.array([16384, -32768], dtype='<i2').tobytes())
        assert samples.dtype == np.float32
        assert samples.tolist() == [0.5, -1.0]

    def test_decode_base64_string(self):
        data = base64.b64encode(np.array([0, 16384], dtype='<i2').tobytes()).decode('ascii')
        assert decode_chunk(data).tolist() == [0.0, 0.5]

    def test_decode_rejects_odd_length(self):
        with pytest.raises(ValueError):
            pcm16_to_float(b'\x00\x01\x02')

    def test_decode_rejects_invalid_base64(self):
        with pytest.raises(ValueError):
            decode_chunk("not base64!!")


@pytest.mark.unit
class TestResample:

    def test_same_rate_is_passthrough(self):
        samples = np.ones(10, dtype=np.float32)
        assert resample(samples, 16000, 16000) is samples

    def test_downsample_48k_to_16k(self):
        samples = np.zeros(4096 * 3, dtype=np.float32)
        out = resample(samples, 48000, 16000)
        assert out.dtype == np.float32
        assert len(out) == 4096

    def test_upsample_44k1_to_16k_length(self):
        samples = np.zeros(44100, dtype=np.float32)
        assert len(resample(samples, 44100, 16000)) == 16000
