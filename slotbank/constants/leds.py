"""LED color values for the APC Key 25 mk2 clip grid.

The controller picks a color from the velocity of a Note On sent to the grid
button's note number.
"""

OFF = 0
DIM_WHITE = 1
RED = 5
GREEN = 13
BRIGHT_PURPLE = 48
YELLOW = 96
BRIGHT_YELLOW = 96
