"""
hotbeat - live-coded MIDI that keeps playing while you edit.

Write a Python file, point a Monitor at it, and save changes while the music
runs. Each save takes effect on the next beat. An edit that fails to load is
reported and ignored. An edit that loads but crashes mid-performance is
dropped, and the previous working version takes over on the same beat.

A live file uses three names - ``bpm``, ``bang`` and ``close`` - plus anything
the session adds (an ``instrument`` and ``Pattern`` by default):

    ```python
    bpm(120)
    melody = Pattern(60, "4202 444= 222= 477=")

    @bang
    def play (beat):
        if beat % 2 == 0:
            pitch, length = melody[beat // 2]
            if pitch is not None:
                instrument.play(0, pitch, length)
    ```

and is performed with:

    ```python
    import hotbeat

    session = hotbeat.Session("song.py", hotbeat.load_config("hotbeat.yaml"))
    session.start()
    ```

Pieces:

- **Timer wheels.** ``WheelRegistry.get(resolution)`` returns the shared
  dispatch loop for that resolution. Callbacks receive their scheduled time,
  so self-rescheduling loops stay on the grid.
- **Generations.** ``Player`` holds one version of the live behaviour;
  ``Monitor`` stacks them and rolls back on failure.
- **Patterns.** ``Pattern(base, "40= -2")`` - digits are semitones above the
  base, ``-`` rests, ``=`` holds the previous step.
- **MIDI.** ``Instrument`` sends through mido; ``Recorder`` writes a Standard
  MIDI File of the session.

Package-level exports: ``Config``, ``Instrument``, ``Metronome``, ``Monitor``,
``Pattern``, ``PatternPlayer``, ``Player``, ``Recorder``, ``Session``,
``TimerWheel``, ``WheelRegistry``, ``load_config``.
"""

import hotbeat.config
import hotbeat.instrument
import hotbeat.monitor
import hotbeat.notation
import hotbeat.performers
import hotbeat.player
import hotbeat.recorder
import hotbeat.scheduler
import hotbeat.session


Config = hotbeat.config.Config
Instrument = hotbeat.instrument.Instrument
Metronome = hotbeat.performers.Metronome
Monitor = hotbeat.monitor.Monitor
Pattern = hotbeat.notation.Pattern
PatternPlayer = hotbeat.performers.PatternPlayer
Player = hotbeat.player.Player
Recorder = hotbeat.recorder.Recorder
Session = hotbeat.session.Session
TimerWheel = hotbeat.scheduler.TimerWheel
WheelRegistry = hotbeat.scheduler.WheelRegistry
load_config = hotbeat.config.load_config
