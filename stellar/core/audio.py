"""Audio output sinks.

A sink accepts fully described tone events and sounds them. Events overlap
freely and are mixed additively. ``create_sink`` picks the sounddevice
backend when PortAudio and an output device are available and otherwise
falls back to the silent ``NullAudioSink``.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, List, Optional

import numpy as np

from stellar.core.synth import ToneEvent, synthesize

logger = logging.getLogger(__name__)


class AudioOutputError(RuntimeError):
    """Raised by a sink that cannot sound an event."""


class AudioSink(ABC):
    @abstractmethod
    def play(self, event: ToneEvent) -> None:
        """Sound ``event`` without blocking the caller."""

    @abstractmethod
    def close(self) -> None:
        """Release the output device. Safe to call more than once."""

    @property
    def available(self) -> bool:
        return True


class NullAudioSink(AudioSink):
    """Accepts events and produces no sound."""

    def __init__(self) -> None:
        self.played = 0
        self.last_event: Optional[ToneEvent] = None
        self.closed = False

    def play(self, event: ToneEvent) -> None:
        self.played += 1
        self.last_event = event
        logger.debug(
            "Null sink event: %s %.2fHz cutoff=%.1fHz gain=%.3f",
            event.waveform.value,
            event.frequency,
            event.filter_freq,
            event.peak_gain,
        )

    def close(self) -> None:
        self.closed = True

    @property
    def available(self) -> bool:
        return False


class _Voice:
    __slots__ = ("samples", "pos")

    def __init__(self, samples: np.ndarray) -> None:
        self.samples = samples
        self.pos = 0


class SoundDeviceSink(AudioSink):
    """Mixes rendered events into a mono sounddevice output stream.

    Events are synthesized on the caller's thread; the PortAudio callback
    thread only sums the pending buffers.
    """

    def __init__(self, sample_rate: int = 44100, blocksize: int = 512) -> None:
        self.sample_rate = sample_rate
        self.blocksize = blocksize
        self._voices: List[_Voice] = []
        self._lock = threading.Lock()
        self._stream: Any = None

    def open(self) -> "SoundDeviceSink":
        try:
            # PortAudio is loaded at import time and raises OSError when missing.
            import sounddevice as sd
        except OSError as e:
            raise AudioOutputError(f"PortAudio unavailable: {e}") from e

        try:
            stream = sd.OutputStream(
                samplerate=self.sample_rate,
                channels=1,
                dtype="float32",
                blocksize=self.blocksize,
                callback=self._callback,
            )
            stream.start()
        except sd.PortAudioError as e:
            raise AudioOutputError(f"Could not open audio output: {e}") from e

        self._stream = stream
        logger.info("Audio output opened: %dHz, blocksize %d", self.sample_rate, self.blocksize)
        return self

    def play(self, event: ToneEvent) -> None:
        if self._stream is None:
            raise AudioOutputError("Audio output is closed")
        samples = synthesize(event, self.sample_rate)
        with self._lock:
            self._voices.append(_Voice(samples))

    def close(self) -> None:
        stream, self._stream = self._stream, None
        if stream is not None:
            stream.stop()
            stream.close()
            logger.info("Audio output closed")
        with self._lock:
            self._voices.clear()

    @property
    def active_voices(self) -> int:
        with self._lock:
            return len(self._voices)

    def _callback(self, outdata, frames, time_info, status) -> None:
        if status:
            logger.debug("Audio callback status: %s", status)
        mix = np.zeros(frames, dtype=np.float32)
        with self._lock:
            remaining: List[_Voice] = []
            for voice in self._voices:
                chunk = voice.samples[voice.pos:voice.pos + frames]
                mix[: len(chunk)] += chunk
                voice.pos += len(chunk)
                if voice.pos < len(voice.samples):
                    remaining.append(voice)
            self._voices = remaining
        np.clip(mix, -1.0, 1.0, out=mix)
        outdata[:, 0] = mix


def create_sink(backend: str = "auto", sample_rate: int = 44100) -> AudioSink:
    """Create an audio sink for one level session."""
    if backend == "null":
        logger.info("Creating NullAudioSink (explicitly requested)")
        return NullAudioSink()
    try:
        return SoundDeviceSink(sample_rate=sample_rate).open()
    except AudioOutputError as e:
        logger.warning("Audio output unavailable, continuing without sound: %s", e)
        return NullAudioSink()
