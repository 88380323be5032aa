"""Unit tests for the whisper.cpp transcription backend."""

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

import pytest
import numpy as np

from murmur.audio.encoder import encode_wav
from murmur.errors import DecodeFailure, FormatError, LoadFailure, ModelNotFound, NotLoaded
from murmur.models.transcription import ModelState
from murmur.transcription.whisper_backend import (
    WHISPER_MODEL_FILENAME,
    WhisperTranscriptionBackend,
)


def segments(*texts):
    return [SimpleNamespace(text=text) for text in texts]


@pytest.fixture
def models_dir(temp_data_dir):
    path = Path(temp_data_dir) / "models"
    path.mkdir()
    (path / WHISPER_MODEL_FILENAME).write_bytes(b"ggml")
    return path


@pytest.fixture
def mock_model():
    with patch('murmur.transcription.whisper_backend.Model') as model_class:
        model_class.return_value.transcribe.return_value = segments("Hello world.", "How are you? ")
        yield model_class


@pytest.fixture(autouse=True)
def mock_redirect():
    with patch('murmur.transcription.whisper_backend.redirect_stderr') as redirect:
        yield redirect


@pytest.fixture
def backend(models_dir, mock_model):
    backend = WhisperTranscriptionBackend(str(models_dir), language="en", n_threads=2)
    backend.load()
    return backend


@pytest.mark.unit
class TestWhisperLoad:

    def test_starts_unloaded(self, models_dir):
        backend = WhisperTranscriptionBackend(str(models_dir))

        assert backend.is_available() is False
        assert backend.state == ModelState.UNLOADED
        assert backend.is_model_downloaded() is True

    def test_load_configures_greedy_single_language(self, models_dir, mock_model):
        backend = WhisperTranscriptionBackend(str(models_dir), language="en", n_threads=2)

        backend.load()

        args, kwargs = mock_model.call_args
        assert args[0] == str((models_dir / WHISPER_MODEL_FILENAME).resolve())
        assert kwargs['params_sampling_strategy'] == 0
        assert kwargs['language'] == "en"
        assert kwargs['translate'] is False
        assert kwargs['n_threads'] == 2
        assert backend.state == ModelState.LOADED

    def test_missing_file(self, temp_data_dir, mock_model):
        backend = WhisperTranscriptionBackend(temp_data_dir)

        with pytest.raises(ModelNotFound, match="download"):
            backend.load()

        mock_model.assert_not_called()
        assert backend.is_available() is False

    def test_rejected_file(self, models_dir, mock_model):
        mock_model.side_effect = RuntimeError("invalid model file")
        backend = WhisperTranscriptionBackend(str(models_dir))

        with pytest.raises(LoadFailure, match="invalid model file"):
            backend.load()

        assert backend.is_available() is False

    def test_reload_replaces_model(self, backend, mock_model):
        first = backend._model
        mock_model.return_value = object()

        backend.load()

        assert backend._model is not first
        assert mock_model.call_count == 2


@pytest.mark.unit
class TestWhisperTranscribe:

    def test_not_loaded(self, models_dir):
        backend = WhisperTranscriptionBackend(str(models_dir))
        wav = encode_wav(np.zeros(160, dtype=np.float32), 16000, 1)

        with pytest.raises(NotLoaded):
            backend.transcribe(wav)

    def test_segments_joined_and_stripped(self, backend):
        wav = encode_wav(np.zeros(16000, dtype=np.float32), 16000, 1)

        assert backend.transcribe(wav) == "Hello world. How are you?"

    def test_silence_gives_empty_text(self, backend, mock_model):
        mock_model.return_value.transcribe.return_value = segments(" ")
        wav = encode_wav(np.zeros(16000, dtype=np.float32), 16000, 1)

        assert backend.transcribe(wav) == ""

    def test_stereo_48k_is_downmixed_and_resampled(self, backend, mock_model, audio_test_data):
        mono = audio_test_data("sine", duration_seconds=1.0, sample_rate=48000) * 0.5
        stereo = np.repeat(mono, 2)

        backend.transcribe(encode_wav(stereo, 48000, 2))

        samples = mock_model.return_value.transcribe.call_args.args[0]
        assert samples.dtype == np.float32
        assert samples.ndim == 1
        assert len(samples) == 16000
        assert np.max(np.abs(samples)) == pytest.approx(0.5, abs=0.01)

    def test_empty_audio_skips_model(self, backend, mock_model):
        wav = encode_wav(np.zeros(0, dtype=np.float32), 44100, 1)

        assert backend.transcribe(wav) == ""
        mock_model.return_value.transcribe.assert_not_called()

    def test_not_a_wav(self, backend):
        with pytest.raises(FormatError):
            backend.transcribe(b"definitely not audio")

    def test_decode_failure(self, backend, mock_model):
        mock_model.return_value.transcribe.side_effect = RuntimeError("whisper_full failed")
        wav = encode_wav(np.zeros(1600, dtype=np.float32), 16000, 1)

        with pytest.raises(DecodeFailure, match="whisper_full failed"):
            backend.transcribe(wav)

    def test_decoding_output_is_silenced(self, backend, mock_model, mock_redirect):
        calls = []
        mock_redirect.return_value.__enter__.side_effect = lambda: calls.append("enter")
        mock_redirect.return_value.__exit__.side_effect = lambda *exc: calls.append("exit")
        mock_model.return_value.transcribe.side_effect = lambda samples: calls.append("decode") or segments("Hi.")
        wav = encode_wav(np.zeros(1600, dtype=np.float32), 16000, 1)

        assert backend.transcribe(wav) == "Hi."

        mock_redirect.assert_called_once_with(to=None)
        assert calls == ["enter", "decode", "exit"]
        assert mock_model.call_args.kwargs['redirect_whispercpp_logs_to'] is None
