"""Software audio mixer: 2D-panned and 3D-positioned samples at 48 kHz."""

from __future__ import annotations

import math
import threading
from dataclasses import dataclass, field
from typing import List, Tuple

import numpy as np

from gamebase.wav import load_wav

AUDIO_RATE = 48000
MIX_SAMPLES = 1024
RAMP_STEP = MIX_SAMPLES / AUDIO_RATE
DEFAULT_RAMP = 1.0 / 60.0

_PI = 3.1415926
_NAN = float("nan")


def _clone(value):
    if isinstance(value, (int, float)):
        return float(value)
    return np.array(value, dtype=float)


def _is_nan(value) -> bool:
    return bool(np.any(np.asarray(value) != np.asarray(value)))


@dataclass
class Ramp:
    """A value that moves smoothly toward ``target`` over ``ramp`` seconds."""

    value: object
    target: object = None
    ramp: float = 0.0

    def __post_init__(self) -> None:
        self.value = _clone(self.value)
        self.target = _clone(self.value if self.target is None else self.target)

    def set(self, value, ramp: float) -> None:
        """Move to ``value`` over ``ramp`` seconds (immediately if ``ramp <= 0``)."""
        if ramp <= 0.0:
            self.value = _clone(value)
            self.target = _clone(value)
            self.ramp = 0.0
        else:
            self.target = _clone(value)
            self.ramp = float(ramp)


@dataclass
class Sample:
    """Mono audio stored as 48 kHz floating-point samples."""

    data: np.ndarray

    def __post_init__(self) -> None:
        self.data = np.asarray(self.data, dtype=np.float32)

    @classmethod
    def from_file(cls, filename) -> "Sample":
        """Load a sample from a '.wav' file."""
        if str(filename).endswith(".wav"):
            return cls(load_wav(filename))
        raise ValueError(
            f"Sample '{filename}' doesn't end in \".wav\" -- unsure how to load."
        )


@dataclass(eq=False)
class PlayingSample:
    """Book-keeping for a sample that is currently playing.

    A sample is in '2D' mode when ``pan`` holds a number and in '3D' mode
    when ``pan`` is NaN and ``position`` / ``half_volume_radius`` are used.
    """

    data: np.ndarray
    volume: Ramp = field(default_factory=lambda: Ramp(1.0))
    pan: Ramp = field(default_factory=lambda: Ramp(_NAN))
    position: Ramp = field(default_factory=lambda: Ramp(np.full(3, _NAN)))
    half_volume_radius: Ramp = field(default_factory=lambda: Ramp(_NAN))
    loop: bool = False
    i: int = 0
    stopping: bool = False
    stopped: bool = False
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    @property
    def is_3d(self) -> bool:
        """True if panning follows the listener and position."""
        return _is_nan(self.pan.value)

    def set_volume(self, new_volume: float, ramp: float = DEFAULT_RAMP) -> None:
        """Change volume over ``ramp`` seconds; ignored once stopping."""
        with self.lock:
            if not self.stopping:
                self.volume.set(new_volume, ramp)

    def set_pan(self, new_pan: float, ramp: float = DEFAULT_RAMP) -> None:
        """Change panning (-1 left to 1 right); only affects 2D samples."""
        if self.is_3d:
            return
        with self.lock:
            self.pan.set(new_pan, ramp)

    def set_position(self, new_position, ramp: float = DEFAULT_RAMP) -> None:
        """Move the source; only affects 3D samples."""
        if not self.is_3d:
            return
        with self.lock:
            self.position.set(new_position, ramp)

    def set_half_volume_radius(self, new_radius: float, ramp: float = DEFAULT_RAMP) -> None:
        """Change the distance at which volume halves; only affects 3D samples."""
        if not self.is_3d:
            return
        with self.lock:
            self.half_volume_radius.set(new_radius, ramp)

    def stop(self, ramp: float = DEFAULT_RAMP) -> None:
        """Fade out over ``ramp`` seconds, after which the sample is removed."""
        with self.lock:
            if not (self.stopping or self.stopped):
                self.stopping = True
                self.volume.target = 0.0
                self.volume.ramp = float(ramp)
            else:
                self.volume.ramp = min(self.volume.ramp, float(ramp))


@dataclass(eq=False)
class Listener:
    """Position and right-pointing unit vector used to pan 3D samples."""

    position: Ramp = field(default_factory=lambda: Ramp(np.zeros(3)))
    right: Ramp = field(default_factory=lambda: Ramp(np.array([1.0, 0.0, 0.0])))
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def set_position_right(self, new_position, new_right, ramp: float = DEFAULT_RAMP) -> None:
        """Move the listener; ``new_right`` is normalized (zero means +x)."""
        right = np.asarray(new_right, dtype=float)
        with self.lock:
            self.position.set(new_position, ramp)
            if not np.any(right):
                self.right.set(np.array([1.0, 0.0, 0.0]), ramp)
            else:
                self.right.set(right / np.linalg.norm(right), ramp)


def compute_pan_weights(pan: float) -> Tuple[float, float]:
    """Equal-power (left, right) gains for ``pan`` in [-1, 1] (clamped)."""
    pan = max(-1.0, min(1.0, pan))
    ang = 0.5 * _PI * (0.5 * (pan + 1.0))
    return math.cos(ang), math.sin(ang)


def compute_pan_from_listener_and_position(
    listener_position, listener_right, source_position, source_half_radius
) -> Tuple[float, float]:
    """(left, right) gains of a source as heard by the listener."""
    to = np.asarray(source_position, dtype=float) - np.asarray(listener_position, dtype=float)
    distance = float(np.linalg.norm(to))
    if distance == 0.0:
        return math.sqrt(2.0), math.sqrt(2.0)
    amt = float(np.dot(np.asarray(listener_right, dtype=float), to)) / distance
    ang = 0.5 * _PI * (0.5 * (amt + 1.0))
    # linear distance attenuation: half volume at the half-volume radius
    att = 1.0 / (1.0 + distance / source_half_radius)
    return math.cos(ang) * att, math.sin(ang) * att


def step_value_ramp(ramp: Ramp) -> None:
    """Advance a scalar ramp by one mix period."""
    if ramp.ramp < RAMP_STEP:
        ramp.value = ramp.target
        ramp.ramp = 0.0
    else:
        ramp.value += (RAMP_STEP / ramp.ramp) * (ramp.target - ramp.value)
        ramp.ramp -= RAMP_STEP


def step_position_ramp(ramp: Ramp) -> None:
    """Advance a position ramp by one mix period, linearly."""
    if ramp.ramp < RAMP_STEP:
        ramp.value = np.array(ramp.target, dtype=float)
        ramp.ramp = 0.0
    else:
        t = RAMP_STEP / ramp.ramp
        ramp.value = ramp.value + (ramp.target - ramp.value) * t
        ramp.ramp -= RAMP_STEP


def step_direction_ramp(ramp: Ramp) -> None:
    """Advance a unit-direction ramp by one mix period along the great circle."""
    if ramp.ramp < RAMP_STEP:
        ramp.value = np.array(ramp.target, dtype=float)
        ramp.ramp = 0.0
        return
    value = np.asarray(ramp.value, dtype=float)
    target = np.asarray(ramp.target, dtype=float)
    norm = np.cross(value, target)
    if not np.any(norm):
        tx, ty, tz = target
        if tx <= ty and tx <= tz:
            norm = np.array([1.0, 0.0, 0.0])
        elif ty <= tz:
            norm = np.array([0.0, 1.0, 0.0])
        else:
            norm = np.array([0.0, 0.0, 1.0])
        norm = norm - target * float(np.dot(target, norm))
    norm = norm / np.linalg.norm(norm)
    perp = np.cross(norm, target)
    angle = math.acos(max(-1.0, min(1.0, float(np.dot(value, target)))))
    angle *= (ramp.ramp - RAMP_STEP) / ramp.ramp
    ramp.value = target * math.cos(angle) + perp * math.sin(angle)
    ramp.ramp -= RAMP_STEP


class Mixer:
    """Mixes playing samples into stereo buffers of ``MIX_SAMPLES`` frames.

    All changes to playing samples, the listener and the global volume are
    made under one lock, so ``mix`` may be called from an audio thread.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self.volume = Ramp(1.0)
        self.listener = Listener(lock=self._lock)
        self.playing_samples: List[PlayingSample] = []

    def _start(self, playing: PlayingSample) -> PlayingSample:
        with self._lock:
            self.playing_samples.append(playing)
        return playing

    def _make_2d(self, sample: Sample, volume: float, pan: float, loop: bool) -> PlayingSample:
        return PlayingSample(
            sample.data, volume=Ramp(volume), pan=Ramp(pan), loop=loop, lock=self._lock
        )

    def _make_3d(self, sample: Sample, volume: float, position, radius: float,
                 loop: bool) -> PlayingSample:
        return PlayingSample(
            sample.data,
            volume=Ramp(volume),
            position=Ramp(np.asarray(position, dtype=float)),
            half_volume_radius=Ramp(radius),
            loop=loop,
            lock=self._lock,
        )

    def play(self, sample: Sample, volume: float = 1.0, pan: float = 0.0) -> PlayingSample:
        """Play ``sample`` once, panned (-1 left to 1 right)."""
        return self._start(self._make_2d(sample, volume, pan, False))

    def play_3d(self, sample: Sample, volume: float, position,
                half_volume_radius: float = math.inf) -> PlayingSample:
        """Play ``sample`` once at a position relative to the listener."""
        return self._start(self._make_3d(sample, volume, position, half_volume_radius, False))

    def loop(self, sample: Sample, volume: float = 1.0, pan: float = 0.0) -> PlayingSample:
        """Play ``sample`` repeatedly until stopped."""
        return self._start(self._make_2d(sample, volume, pan, True))

    def loop_3d(self, sample: Sample, volume: float, position,
                half_volume_radius: float = math.inf) -> PlayingSample:
        """Loop ``sample`` at a position relative to the listener."""
        return self._start(self._make_3d(sample, volume, position, half_volume_radius, True))

    def stop_all_samples(self) -> None:
        """Fade out every playing sample."""
        with self._lock:
            for playing in self.playing_samples:
                playing.stop()

    def set_volume(self, new_volume: float, ramp: float = DEFAULT_RAMP) -> None:
        """Change the global volume over ``ramp`` seconds."""
        with self._lock:
            self.volume.set(new_volume, ramp)

    def _gains(self, playing: PlayingSample, position, right) -> Tuple[float, float]:
        if playing.is_3d:
            return compute_pan_from_listener_and_position(
                position, right, playing.position.value, playing.half_volume_radius.value
            )
        return compute_pan_weights(playing.pan.value)

    def mix(self) -> np.ndarray:
        """Mix the next ``MIX_SAMPLES`` frames; returns a (frames, 2) float32 array."""
        buffer = np.zeros((MIX_SAMPLES, 2), dtype=np.float64)
        with self._lock:
            listener = self.listener
            start_volume = self.volume.value
            start_position = np.array(listener.position.value, dtype=float)
            start_right = np.array(listener.right.value, dtype=float)

            step_value_ramp(self.volume)
            step_position_ramp(listener.position)
            step_direction_ramp(listener.right)

            end_volume = self.volume.value
            end_position = np.array(listener.position.value, dtype=float)
            end_right = np.array(listener.right.value, dtype=float)

            still_playing = []
            for playing in self.playing_samples:
                start_l, start_r = self._gains(playing, start_position, start_right)
                if playing.is_3d:
                    step_position_ramp(playing.position)
                    step_value_ramp(playing.half_volume_radius)
                else:
                    step_value_ramp(playing.pan)
                gain = start_volume * playing.volume.value
                start_l, start_r = start_l * gain, start_r * gain

                step_value_ramp(playing.volume)

                end_l, end_r = self._gains(playing, end_position, end_right)
                gain = end_volume * playing.volume.value
                end_l, end_r = end_l * gain, end_r * gain

                data = playing.data
                length = len(data)
                if length == 0 or playing.i >= length:
                    playing.stopped = True
                    continue

                if playing.loop:
                    count = MIX_SAMPLES
                    indices = (playing.i + np.arange(count)) % length
                    playing.i = (playing.i + count) % length
                else:
                    count = min(MIX_SAMPLES, length - playing.i)
                    indices = playing.i + np.arange(count)
                    playing.i += count

                steps = np.arange(count, dtype=np.float64)
                values = np.asarray(data, dtype=np.float64)[indices]
                buffer[:count, 0] += (start_l + steps * ((end_l - start_l) / MIX_SAMPLES)) * values
                buffer[:count, 1] += (start_r + steps * ((end_r - start_r) / MIX_SAMPLES)) * values

                if playing.i >= length or (playing.stopping and playing.volume.value == 0.0):
                    playing.stopped = True
                else:
                    still_playing.append(playing)
            self.playing_samples[:] = still_playing
        return buffer.astype(np.float32)