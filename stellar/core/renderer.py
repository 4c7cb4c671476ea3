from __future__ import annotations

import logging
from typing import Callable, Optional

from stellar.core.audio import AudioOutputError, AudioSink
from stellar.core.levels import SoundConfig
from stellar.core.synth import PEAK_GAIN, ToneEvent

logger = logging.getLogger(__name__)


def tone_event(config: SoundConfig, volume: int) -> ToneEvent:
    """Map a body's sound config and the 0..100 volume onto one tone event."""
    return ToneEvent(
        waveform=config.waveform,
        frequency=config.frequency,
        filter_freq=config.filter_freq,
        peak_gain=(volume / 100) * PEAK_GAIN,
    )


class SoundEventRenderer:
    """Sounds one event per call and reports it as a trigger.

    Sound is best effort: a failing sink is logged and the trigger is still
    reported, so scoring never depends on the audio device.
    """

    def __init__(self, sink: AudioSink, on_trigger: Optional[Callable[[], None]] = None) -> None:
        self._sink = sink
        self._on_trigger = on_trigger

    @property
    def sink(self) -> AudioSink:
        return self._sink

    def render(self, config: SoundConfig, volume: int) -> ToneEvent:
        event = tone_event(config, volume)
        try:
            self._sink.play(event)
        except AudioOutputError as e:
            logger.warning("Could not play %.2fHz tone: %s", config.frequency, e)
        if self._on_trigger is not None:
            self._on_trigger()
        return event
