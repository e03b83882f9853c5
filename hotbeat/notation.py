import typing


class Slot (typing.NamedTuple):

	"""
	One step of a pattern: a pitch (``None`` for a rest) held for *duration* beats.
	"""

	value: typing.Optional[int]
	duration: int


class PatternError (ValueError):
	pass


REST = "-"
HOLD = "="


def parse (notation: str) -> typing.List[Slot]:

	"""
	Compile a pattern string into slots with pitches relative to the base.

	**Syntax:**
	- `0`-`9`: a note that many semitones above the base.
	- `-`: a rest.
	- `=`: hold the previous slot for one more beat.
	- Whitespace is ignored; use it to group bars.
	- Any other character is a note at the base pitch.

	A `=` with nothing before it opens a rest, so `"==4"` is a two-beat
	rest followed by a note.

	Parameters:
		notation: The string to compile.

	Returns:
		A list of `Slot` objects in playing order.

	Example:
		```python
		parse("40= -2")
		# [Slot(4, 1), Slot(0, 2), Slot(None, 1), Slot(2, 1)]
		```
	"""

	symbols = [char for char in notation if not char.isspace()]
	slots: typing.List[Slot] = []

	for position, char in enumerate(symbols):

		if char == HOLD:

			if position > 0:
				continue

			# Leading hold: becomes a rest head.
			value: typing.Optional[int] = None

		elif char == REST:
			value = None

		elif char in "0123456789":
			value = int(char)

		else:
			value = 0

		slots.append(Slot(value, 1 + _run_length(symbols, position + 1)))

	return slots


def _run_length (symbols: typing.List[str], start: int) -> int:

	"""Count consecutive holds from *start*."""

	count = 0

	while start + count < len(symbols) and symbols[start + count] == HOLD:
		count += 1

	return count


class Pattern:

	"""
	A looping note/rest sequence built from notation.

	Indexing wraps around, so a pattern can be stepped forever::

		mary = Pattern(60, "4202 444= 222= 477=")
		mary[0]   # Slot(value=64, duration=1)
		mary[13]  # same as mary[0]
	"""

	def __init__ (self, base: int, notation: str) -> None:

		"""Compile *notation* against the *base* pitch.

		Raises ``PatternError`` when the notation holds no slots.
		"""

		slots = parse(notation)

		if not slots:
			raise PatternError(f"Pattern {notation!r} contains no notes or rests")

		self.base = base
		self.notation = notation
		self.slots: typing.Tuple[Slot, ...] = tuple(slots)

	def __repr__ (self) -> str:

		return f"Pattern({self.base!r}, {self.notation!r})"

	def index (self, i: int) -> Slot:

		"""Return slot *i* modulo the pattern size, with an absolute pitch."""

		value, duration = self.slots[i % len(self.slots)]

		if value is None:
			return Slot(None, duration)

		return Slot(self.base + value, duration)

	def __getitem__ (self, i: int) -> Slot:

		return self.index(i)

	def size (self) -> int:

		return len(self.slots)

	def __len__ (self) -> int:

		return len(self.slots)

	@property
	def total_beats (self) -> int:

		"""Length of one pass through the pattern, in beats."""

		return sum(slot.duration for slot in self.slots)
