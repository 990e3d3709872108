"""
Audio layer for Beatforge.

Modules:
- clock: Audio-anchored playback clock
- decoder: Audio decoding with import ceilings
- device: Output device contract
- sounddevice_output: sounddevice (PortAudio) output backend
- waveform: Peak envelope for the waveform lane
"""
