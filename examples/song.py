# A live file. Run examples/perform.py, then edit and save this file while it
# plays: changes are picked up on the next beat. Break it on purpose - a typo
# is reported and ignored, a crash inside play() falls back to the last
# version that worked.
#
# Available names: bpm, bang, close, instrument, Pattern, hotbeat.

bpm(120)

melody = Pattern(60, "4202 444= 222= 477=")
bass = Pattern(36, "0-5- 0-7-")

@bang
def lead (beat):
	pitch, length = melody[beat]
	if pitch is not None:
		instrument.play(0, pitch, length * 0.9)

@bang
def low (beat):
	if beat % 2 == 0:
		pitch, length = bass[beat // 2]
		if pitch is not None:
			instrument.play(1, pitch, 1.5, velocity=90)
