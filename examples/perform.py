import logging
import os
import time

import hotbeat


logging.basicConfig(level=logging.INFO)

HERE = os.path.dirname(os.path.abspath(__file__))

# Settings come from hotbeat.yaml beside this script when present, e.g.
#
#   device: "IAC Driver Bus 1"
#   program: 0
#   record: true
config = hotbeat.load_config(os.path.join(HERE, "hotbeat.yaml"))

session = hotbeat.Session(os.path.join(HERE, "song.py"), config)

if __name__ == "__main__":
	print("Edit examples/song.py while this plays. Press Ctrl+C to stop.")
	session.start()

	try:
		while not session.halted:
			time.sleep(0.5)
	except KeyboardInterrupt:
		pass
	finally:
		session.stop()
