"""Unit tests for the PyAudio speaker output."""

from unittest.mock import Mock

import numpy as np
import pyaudio
import pytest

from nyayalive.audio.output import PlaybackSource, PyAudioOutput


def render(output, frames):
    data, flag = output._render(None, frames, {}, 0)
    return np.frombuffer(data, dtype=np.float32), flag


@pytest.mark.unit
class TestPlaybackSource:

    def test_timing(self):
        source = PlaybackSource(np.zeros(2400, dtype=np.float32), 1.0, 24000)
        assert source.duration == pytest.approx(0.1)
        assert source.end_time == pytest.approx(1.1)

    def test_finish_notifies_once(self):
        on_ended = Mock()
        source = PlaybackSource(np.zeros(10, dtype=np.float32), 0.0, 24000, on_ended)
        source.finish()
        source.finish()
        on_ended.assert_called_once_with(source)

    def test_stop_suppresses_notification(self):
        on_ended = Mock()
        source = PlaybackSource(np.zeros(10, dtype=np.float32), 0.0, 24000, on_ended)
        source.stop()
        source.finish()
        on_ended.assert_not_called()


@pytest.mark.unit
class TestPyAudioOutput:

    def test_open_starts_callback_stream(self, mock_pyaudio):
        output = PyAudioOutput(sample_rate=24000, block_size=512)
        output.open()

        kwargs = mock_pyaudio['instance'].open.call_args.kwargs
        assert kwargs['rate'] == 24000
        assert kwargs['output'] is True
        assert kwargs['format'] == pyaudio.paFloat32
        assert kwargs['stream_callback'] == output._render
        assert output.current_time == 0.0

    def test_render_mixes_scheduled_source(self, mock_pyaudio):
        output = PyAudioOutput(sample_rate=100, block_size=64)
        output.open()
        on_ended = Mock()
        output.schedule(np.full(100, 0.5, dtype=np.float32), 0.0, on_ended)

        block, flag = render(output, 64)
        assert flag == pyaudio.paContinue
        assert np.allclose(block, 0.5)
        assert output.current_time == pytest.approx(0.64)
        on_ended.assert_not_called()

        block, _ = render(output, 64)
        assert np.allclose(block[:36], 0.5)
        assert np.allclose(block[36:], 0.0)
        on_ended.assert_called_once()
        assert output.sources == []

    def test_render_respects_start_time(self, mock_pyaudio):
        output = PyAudioOutput(sample_rate=100, block_size=32)
        output.open()
        output.schedule(np.full(8, 0.25, dtype=np.float32), 0.1)

        block, _ = render(output, 32)
        assert np.allclose(block[:10], 0.0)
        assert np.allclose(block[10:18], 0.25)
        assert np.allclose(block[18:], 0.0)

    def test_stopped_source_is_silent(self, mock_pyaudio):
        output = PyAudioOutput(sample_rate=100, block_size=32)
        output.open()
        source = output.schedule(np.full(64, 0.5, dtype=np.float32), 0.0)
        source.stop()

        block, _ = render(output, 32)
        assert np.allclose(block, 0.0)
        assert output.sources == []

    def test_close_releases_device(self, mock_pyaudio):
        output = PyAudioOutput()
        output.open()
        source = output.schedule(np.zeros(10, dtype=np.float32), 0.0)

        output.close()

        assert source.stopped is True
        mock_pyaudio['stream'].stop_stream.assert_called_once()
        mock_pyaudio['stream'].close.assert_called_once()
        mock_pyaudio['instance'].terminate.assert_called_once()
        assert output.stream is None
