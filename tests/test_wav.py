import struct
import wave

import numpy as np
import pytest

from gamebase.wav import AUDIO_RATE, load_wav


def _write_pcm(path, frames, channels=1, rate=AUDIO_RATE, width=2):
    with wave.open(str(path), "wb") as handle:
        handle.setnchannels(channels)
        handle.setsampwidth(width)
        handle.setframerate(rate)
        handle.writeframes(frames)


def _write_float(path, values, rate=AUDIO_RATE):
    payload = struct.pack(f"<{len(values)}f", *values)
    fmt = struct.pack("<HHIIHH", 3, 1, rate, rate * 4, 4, 32)
    body = b"WAVE" + b"fmt " + struct.pack("<I", len(fmt)) + fmt
    body += b"data" + struct.pack("<I", len(payload)) + payload
    path.write_bytes(b"RIFF" + struct.pack("<I", len(body)) + body)


def test_16_bit_mono_values(tmp_path):
    path = tmp_path / "a.wav"
    _write_pcm(path, struct.pack("<4h", 0, 16384, -16384, -32768))
    data = load_wav(path)
    assert data.dtype == np.float32
    assert data.tolist() == pytest.approx([0.0, 0.5, -0.5, -1.0])


def test_stereo_is_averaged(tmp_path):
    path = tmp_path / "s.wav"
    _write_pcm(path, struct.pack("<4h", 16384, 0, -16384, -16384), channels=2)
    data = load_wav(path)
    assert data.tolist() == pytest.approx([0.25, -0.5])


def test_8_bit_unsigned_midpoint_is_silence(tmp_path):
    path = tmp_path / "b.wav"
    _write_pcm(path, bytes([128, 128, 128]), width=1)
    data = load_wav(path)
    assert data.tolist() == [0.0, 0.0, 0.0]


def test_float_wav_round_trip(tmp_path):
    path = tmp_path / "f.wav"
    values = [0.125, -0.75, 1.0]
    _write_float(path, values)
    assert load_wav(path).tolist() == pytest.approx(values)


def test_half_rate_is_upsampled(tmp_path):
    path = tmp_path / "r.wav"
    _write_pcm(path, struct.pack("<4h", 0, 8192, 16384, 8192), rate=AUDIO_RATE // 2)
    data = load_wav(path)
    assert len(data) == 8
    # original samples land on even indices
    assert data[::2].tolist() == pytest.approx([0.0, 0.25, 0.5, 0.25])


def test_not_riff_raises(tmp_path):
    path = tmp_path / "x.wav"
    path.write_bytes(b"this is not audio at all")
    with pytest.raises(ValueError, match="Failed to load WAV file"):
        load_wav(path)


def test_missing_data_chunk_raises(tmp_path):
    path = tmp_path / "n.wav"
    fmt = struct.pack("<HHIIHH", 1, 1, AUDIO_RATE, AUDIO_RATE * 2, 2, 16)
    body = b"WAVE" + b"fmt " + struct.pack("<I", len(fmt)) + fmt
    path.write_bytes(b"RIFF" + struct.pack("<I", len(body)) + body)
    with pytest.raises(ValueError, match="data"):
        load_wav(path)


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_wav(tmp_path / "absent.wav")