"""Defaults shared across hotbeat.

Tempo, scheduler resolutions and MIDI value ranges. Anything a caller can
override is passed in explicitly; these are only the fallbacks.
"""

# Tempo

DEFAULT_BPM = 120
SECONDS_PER_MINUTE = 60.0

# Scheduler resolutions (seconds)

MONITOR_RESOLUTION = 0.5		# file polling / beat loop wheel
RESOLUTION_DIVISOR = 10			# instrument wheels tick at interval / 10
RESOLUTION_QUANTUM = 1000		# registry keys are integer milliseconds

# MIDI

MIDI_CHANNELS = 16
MIDI_DATA_MAX = 127
DEFAULT_VELOCITY = 64			# note_on / note_off
DEFAULT_PLAY_VELOCITY = 100		# Instrument.play
TICKS_PER_BEAT = 480			# Standard MIDI File resolution

# Performers

METRONOME_PITCH = 84
METRONOME_PROGRAM = 115
METRONOME_CLICK_BEATS = 0.1
METRONOME_DELAY = 0.2			# seconds between the bang and the click
NOTE_GAP_BEATS = 0.1			# PatternPlayer shortens each note by this
