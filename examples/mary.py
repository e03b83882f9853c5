import logging
import time

import hotbeat


logging.basicConfig(level=logging.INFO)

BPM = 60

instrument = hotbeat.Instrument(bpm=BPM)
instrument.program_change(0, 16)

player = hotbeat.PatternPlayer(instrument, hotbeat.Pattern(60, "4202 444= 222= 477="), bpm=BPM)

if __name__ == "__main__":
	player.start()

	while not player.finished:
		time.sleep(0.1)

	time.sleep(2)
	instrument.close()
	print("Done")
