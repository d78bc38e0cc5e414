"""
Tone output device for C8EMU.
Uses pygame.mixer to play the CHIP-8 buzzer.

The CHIP-8 has a single sound source: a fixed-pitch tone that is audible
while the sound timer is non-zero.  The machine reports that as a boolean
from every timer tick; this module turns the boolean's edges into
start/stop calls on a looping square-wave ``pygame.mixer.Sound``.

Approach
--------
1. ``pygame.mixer`` is initialised mono, signed 16-bit.
2. One period-aligned buffer of a 440 Hz square wave is generated with
   numpy and wrapped in a ``Sound`` once.
3. :meth:`ToneDevice.update` plays the sound with ``loops=-1`` on a
   rising edge and stops it on a falling edge.

Any mixer failure disables the device with a warning; it never propagates
into the emulation loop.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
import pygame

logger = logging.getLogger(__name__)

_SAMPLE_RATE: int = 44100
_TONE_HZ: int = 440
_AMPLITUDE: int = 6000

# Minimum pygame mixer buffer size (in samples).  Smaller values reduce
# latency but may cause underruns on slower machines.
_MIXER_BUFFER_SAMPLES: int = 512


def square_wave(frequency: int, sample_rate: int, amplitude: int) -> np.ndarray:
    """Return one second's worth of a signed 16-bit square wave, trimmed
    to a whole number of periods so it loops without a click."""
    period = max(2, sample_rate // frequency)
    cycles = max(1, sample_rate // period)
    t = np.arange(period * cycles)
    wave = np.where((t % period) < period // 2, amplitude, -amplitude)
    return wave.astype(np.int16)


class ToneDevice:
    """Start and stop the buzzer from the machine's tone flag.

    Parameters
    ----------
    enabled:
        Set to ``False`` to create the device in a silent / no-op mode.
    frequency:
        Tone pitch in Hz.
    """

    def __init__(self, *, enabled: bool = True, frequency: int = _TONE_HZ) -> None:
        self._enabled: bool = enabled
        self._frequency: int = frequency
        self._sound: Optional[pygame.mixer.Sound] = None
        self._channel: Optional[pygame.mixer.Channel] = None
        self._playing: bool = False

        if not self._enabled:
            logger.info("ToneDevice: disabled (silent mode)")
            return

        self._init_mixer()

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def playing(self) -> bool:
        return self._playing

    def update(self, tone_on: bool) -> None:
        """Apply the tone flag from one timer tick."""
        if not self._enabled or self._sound is None:
            return
        if tone_on == self._playing:
            return

        try:
            if tone_on:
                self._channel = self._sound.play(loops=-1)
            elif self._channel is not None:
                self._channel.stop()
        except pygame.error as exc:
            logger.warning("ToneDevice: playback failed (%s); disabling audio", exc)
            self._shutdown_mixer()
            self._enabled = False
            return
        self._playing = tone_on

    def shutdown(self) -> None:
        """Stop playback and release the mixer."""
        self._shutdown_mixer()

    # ------------------------------------------------------------------
    # Volume control
    # ------------------------------------------------------------------

    def set_volume(self, volume: float) -> None:
        """Set the playback volume (0.0 = mute, 1.0 = full)."""
        volume = max(0.0, min(1.0, volume))
        if self._sound is not None:
            self._sound.set_volume(volume)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _init_mixer(self) -> None:
        """Initialise the pygame mixer and build the tone buffer."""
        # pygame.init() may already have started the mixer with default
        # parameters; restart it with ours.
        pygame.mixer.quit()
        try:
            pygame.mixer.init(
                frequency=_SAMPLE_RATE,
                size=-16,       # signed 16-bit
                channels=1,     # mono
                buffer=_MIXER_BUFFER_SAMPLES,
            )
        except pygame.error as exc:
            logger.warning("ToneDevice: mixer init failed (%s); audio disabled", exc)
            self._enabled = False
            return

        actual_freq, _size, actual_channels = pygame.mixer.get_init()
        wave = square_wave(self._frequency, actual_freq, _AMPLITUDE)
        if actual_channels > 1:
            wave = np.repeat(wave[:, np.newaxis], actual_channels, axis=1)
        self._sound = pygame.sndarray.make_sound(np.ascontiguousarray(wave))

        logger.info(
            "ToneDevice: mixer ready at %d Hz, %d ch (tone %d Hz)",
            actual_freq,
            actual_channels,
            self._frequency,
        )

    def _shutdown_mixer(self) -> None:
        if self._channel is not None:
            try:
                self._channel.stop()
            except pygame.error:
                logger.debug("ToneDevice: channel stop failed during shutdown")
            self._channel = None
        self._sound = None
        self._playing = False

        try:
            pygame.mixer.quit()
        except pygame.error:
            logger.debug("ToneDevice: mixer quit failed during shutdown")
