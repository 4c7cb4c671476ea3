"""Tests for stellar.core.synth – offline tone rendering."""

from __future__ import annotations

import numpy as np
import pytest

from stellar.core.levels import Waveform
from stellar.core.synth import (
    EVENT_DURATION,
    FILTER_Q,
    FLOOR_GAIN,
    PEAK_GAIN,
    ToneEvent,
    envelope,
    lowpass_coefficients,
    oscillator,
    synthesize,
)

SR = 44100


class TestConstants:
    def test_fixed_event_shape(self):
        assert PEAK_GAIN == 0.3
        assert FLOOR_GAIN == 0.001
        assert EVENT_DURATION == 0.5
        assert FILTER_Q == 10.0


# ---------------------------------------------------------------------------
# Oscillators
# ---------------------------------------------------------------------------

class TestOscillator:
    @pytest.mark.parametrize("waveform", list(Waveform))
    def test_length_and_bounds(self, waveform: Waveform):
        out = oscillator(waveform, 440.0, 1000, SR)
        assert out.shape == (1000,)
        # additive band-limited waves overshoot slightly (Gibbs), never wildly
        assert np.max(np.abs(out)) < 1.25

    def test_sine_starts_at_zero(self):
        out = oscillator(Waveform.SINE, 440.0, 10, SR)
        assert out[0] == pytest.approx(0.0)

    def test_sine_period(self):
        # 441 Hz at 44100 Hz repeats every 100 samples
        out = oscillator(Waveform.SINE, 441.0, 300, SR)
        np.testing.assert_allclose(out[:100], out[100:200], atol=1e-9)

    def test_square_is_mostly_plus_minus_one(self):
        out = oscillator(Waveform.SQUARE, 100.0, SR // 100, SR)
        assert np.median(np.abs(out)) == pytest.approx(1.0, abs=0.05)

    def test_harmonics_stay_below_nyquist(self):
        out = oscillator(Waveform.SAWTOOTH, 5000.0, 4096, SR)
        spectrum = np.abs(np.fft.rfft(out * np.hanning(len(out))))
        freqs = np.fft.rfftfreq(len(out), 1 / SR)
        # harmonics at 5k, 10k, 15k, 20k only; nothing aliased down to 2-4kHz
        band = (freqs > 2000) & (freqs < 4000)
        assert spectrum[band].max() < 0.01 * spectrum.max()

    def test_above_nyquist_is_silent(self):
        out = oscillator(Waveform.SQUARE, 30000.0, 100, SR)
        assert not out.any()


# ---------------------------------------------------------------------------
# Filter and envelope
# ---------------------------------------------------------------------------

class TestLowpass:
    def test_unity_dc_gain(self):
        b, a = lowpass_coefficients(1000.0, FILTER_Q, SR)
        assert a[0] == pytest.approx(1.0)
        assert b.sum() / a.sum() == pytest.approx(1.0)

    def test_cutoff_clamped_below_nyquist(self):
        b, a = lowpass_coefficients(100000.0, FILTER_Q, SR)
        assert np.all(np.isfinite(b)) and np.all(np.isfinite(a))


class TestEnvelope:
    def test_starts_at_peak_and_reaches_floor(self):
        env = envelope(0.15, FLOOR_GAIN, SR + 1, SR, 1.0)
        assert env[0] == pytest.approx(0.15)
        assert env[-1] == pytest.approx(FLOOR_GAIN)

    def test_monotonic_decay(self):
        env = envelope(0.3, FLOOR_GAIN, 1000, SR, EVENT_DURATION)
        assert np.all(np.diff(env) < 0)

    def test_zero_peak_is_silent(self):
        assert not envelope(0.0, FLOOR_GAIN, 100, SR, EVENT_DURATION).any()


# ---------------------------------------------------------------------------
# Full event
# ---------------------------------------------------------------------------

class TestSynthesize:
    def test_duration_fixed(self):
        event = ToneEvent(Waveform.SINE, 440.0, 1000.0, peak_gain=0.15)
        out = synthesize(event, SR)
        assert out.dtype == np.float32
        assert len(out) == int(EVENT_DURATION * SR)

    def test_zero_volume_is_silent(self):
        event = ToneEvent(Waveform.SAWTOOTH, 329.63, 500.0, peak_gain=0.0)
        assert not synthesize(event, SR).any()

    def test_decays(self):
        event = ToneEvent(Waveform.TRIANGLE, 523.25, 2000.0, peak_gain=0.3)
        out = synthesize(event, SR)
        head = np.abs(out[:2000]).max()
        tail = np.abs(out[-2000:]).max()
        assert head > 0.05
        assert tail < head / 50

    def test_scales_with_peak_gain(self):
        loud = synthesize(ToneEvent(Waveform.SINE, 440.0, 1000.0, peak_gain=0.3), SR)
        quiet = synthesize(ToneEvent(Waveform.SINE, 440.0, 1000.0, peak_gain=0.15), SR)
        assert np.abs(loud).max() == pytest.approx(2 * np.abs(quiet).max(), rel=0.05)
