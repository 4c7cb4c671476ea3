"""Offline rendering of a single tone event to a float32 sample buffer.

The signal chain mirrors a browser Web Audio graph:

    band-limited oscillator -> biquad low-pass (Q in dB) -> exponential gain ramp

Oscillators are built additively from harmonics below Nyquist so that
sawtooth/square/triangle tones do not alias at high pitches.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from scipy.signal import lfilter

from stellar.core.levels import Waveform

FILTER_Q = 10.0
PEAK_GAIN = 0.3
FLOOR_GAIN = 0.001
EVENT_DURATION = 0.5


@dataclass(frozen=True)
class ToneEvent:
    """Everything an audio sink needs to sound one trigger."""

    waveform: Waveform
    frequency: float
    filter_freq: float
    peak_gain: float
    q: float = FILTER_Q
    floor_gain: float = FLOOR_GAIN
    duration: float = EVENT_DURATION


def oscillator(waveform: Waveform, frequency: float, n_samples: int, sample_rate: int) -> NDArray[np.float64]:
    """Unit-amplitude band-limited waveform starting at phase 0."""
    phase = 2.0 * math.pi * frequency * np.arange(n_samples, dtype=np.float64) / sample_rate
    if waveform is Waveform.SINE:
        return np.sin(phase)

    nyquist = sample_rate / 2.0
    out = np.zeros(n_samples, dtype=np.float64)
    k = 1
    while k * frequency < nyquist:
        if waveform is Waveform.SAWTOOTH:
            coeff = (2.0 / (math.pi * k)) * (1 if k % 2 else -1)
        elif k % 2 == 0:
            coeff = 0.0
        elif waveform is Waveform.SQUARE:
            coeff = 4.0 / (math.pi * k)
        else:
            # triangle: odd harmonics, alternating sign, 1/k^2 roll-off
            coeff = (8.0 / (math.pi * math.pi * k * k)) * (1 if (k // 2) % 2 == 0 else -1)
        if coeff:
            out += coeff * np.sin(k * phase)
        k += 1
    return out


def lowpass_coefficients(cutoff: float, q_db: float, sample_rate: int) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """RBJ low-pass biquad with Q expressed in dB of resonance, normalised so a[0] == 1."""
    cutoff = min(max(cutoff, 1.0), 0.49 * sample_rate)
    w0 = 2.0 * math.pi * cutoff / sample_rate
    cos_w0 = math.cos(w0)
    alpha = math.sin(w0) / 2.0 * 10.0 ** (-q_db / 20.0)

    b = np.array([(1.0 - cos_w0) / 2.0, 1.0 - cos_w0, (1.0 - cos_w0) / 2.0])
    a = np.array([1.0 + alpha, -2.0 * cos_w0, 1.0 - alpha])
    return b / a[0], a / a[0]


def envelope(peak: float, floor: float, n_samples: int, sample_rate: int, duration: float) -> NDArray[np.float64]:
    """Exponential ramp from ``peak`` reaching ``floor`` at ``duration`` seconds.

    A non-positive peak cannot ramp exponentially and stays silent.
    """
    if peak <= 0.0:
        return np.zeros(n_samples, dtype=np.float64)
    t = np.arange(n_samples, dtype=np.float64) / sample_rate
    return peak * np.power(floor / peak, t / duration)


def synthesize(event: ToneEvent, sample_rate: int = 44100) -> NDArray[np.float32]:
    n_samples = int(round(event.duration * sample_rate))
    tone = oscillator(event.waveform, event.frequency, n_samples, sample_rate)
    b, a = lowpass_coefficients(event.filter_freq, event.q, sample_rate)
    filtered = lfilter(b, a, tone)
    gain = envelope(event.peak_gain, event.floor_gain, n_samples, sample_rate, event.duration)
    return (filtered * gain).astype(np.float32)
