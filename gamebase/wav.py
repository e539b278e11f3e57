"""Loading of WAV files as 48 kHz mono floating-point audio."""

from __future__ import annotations

import logging
import struct

import numpy as np

AUDIO_RATE = 48000

_FORMAT_PCM = 0x0001
_FORMAT_FLOAT = 0x0003
_FORMAT_EXTENSIBLE = 0xFFFE

_log = logging.getLogger(__name__)


def _chunks(raw: bytes):
    """Yield ``(chunk_id, payload)`` for each chunk inside a RIFF/WAVE body."""
    offset = 12
    while offset + 8 <= len(raw):
        chunk_id, size = struct.unpack_from("<4sI", raw, offset)
        offset += 8
        yield chunk_id, raw[offset:offset + size]
        offset += size + (size & 1)


def _decode_samples(payload: bytes, audio_format: int, bits: int) -> np.ndarray:
    width = bits // 8
    usable = len(payload) - len(payload) % width if width else 0
    payload = payload[:usable]
    if audio_format == _FORMAT_FLOAT:
        if bits == 32:
            return np.frombuffer(payload, dtype="<f4").astype(np.float64)
        if bits == 64:
            return np.frombuffer(payload, dtype="<f8").astype(np.float64)
        raise ValueError(f"unsupported float sample size of {bits} bits")
    if audio_format == _FORMAT_PCM:
        if bits == 8:
            raw = np.frombuffer(payload, dtype=np.uint8).astype(np.float64)
            return (raw - 128.0) / 128.0
        if bits == 16:
            return np.frombuffer(payload, dtype="<i2").astype(np.float64) / 32768.0
        if bits == 24:
            triples = np.frombuffer(payload, dtype=np.uint8).reshape(-1, 3).astype(np.int32)
            values = triples[:, 0] | (triples[:, 1] << 8) | (triples[:, 2] << 16)
            values = np.where(values & 0x800000, values - 0x1000000, values)
            return values.astype(np.float64) / 8388608.0
        if bits == 32:
            return np.frombuffer(payload, dtype="<i4").astype(np.float64) / 2147483648.0
        raise ValueError(f"unsupported PCM sample size of {bits} bits")
    raise ValueError(f"unsupported WAV encoding 0x{audio_format:04x}")


def _parse(raw: bytes):
    if len(raw) < 12 or raw[0:4] != b"RIFF" or raw[8:12] != b"WAVE":
        raise ValueError("not a RIFF/WAVE file")
    fmt = None
    data = None
    for chunk_id, payload in _chunks(raw):
        if chunk_id == b"fmt " and fmt is None:
            fmt = payload
        elif chunk_id == b"data" and data is None:
            data = payload
    if fmt is None or len(fmt) < 16:
        raise ValueError("missing or short 'fmt ' chunk")
    if data is None:
        raise ValueError("missing 'data' chunk")

    audio_format, channels, rate, _byte_rate, _align, bits = struct.unpack_from("<HHIIHH", fmt)
    if audio_format == _FORMAT_EXTENSIBLE:
        if len(fmt) < 26:
            raise ValueError("short extensible 'fmt ' chunk")
        (audio_format,) = struct.unpack_from("<H", fmt, 24)
    if channels == 0:
        raise ValueError("WAV file has no channels")
    if rate == 0:
        raise ValueError("WAV file has a sampling rate of zero")
    if bits == 0 or bits % 8 != 0:
        raise ValueError(f"unsupported sample size of {bits} bits")
    return audio_format, channels, rate, bits, data


def _resample(mono: np.ndarray, rate: int) -> np.ndarray:
    if rate == AUDIO_RATE or mono.size == 0:
        return mono
    out_len = (mono.size * AUDIO_RATE) // rate
    positions = np.arange(out_len, dtype=np.float64) * (rate / AUDIO_RATE)
    return np.interp(positions, np.arange(mono.size, dtype=np.float64), mono)


def load_wav(filename) -> np.ndarray:
    """Load a WAV file as 48 kHz mono float32 samples.

    Multi-channel audio is mixed down by averaging and other rates are
    resampled. Raises ValueError if the file is not a WAV file this
    loader can decode.
    """
    with open(filename, "rb") as handle:
        raw = handle.read()
    try:
        audio_format, channels, rate, bits, payload = _parse(raw)
        samples = _decode_samples(payload, audio_format, bits)
    except (ValueError, struct.error) as exc:
        raise ValueError(f"Failed to load WAV file '{filename}'; {exc}") from exc

    frames = samples.size // channels
    mono = samples[:frames * channels].reshape(frames, channels).mean(axis=1)

    if not (audio_format == _FORMAT_FLOAT and bits == 32 and channels == 1 and rate == AUDIO_RATE):
        _log.info(
            "WAV file '%s' didn't load as %d Hz, float32, mono; converting.",
            filename, AUDIO_RATE,
        )
    data = _resample(mono, rate).astype(np.float32)

    low = min(0.0, float(data.min())) if data.size else 0.0
    high = max(0.0, float(data.max())) if data.size else 0.0
    _log.info("Range: %g, %g", low, high)
    return data