"""Z-Buff party sync: shared countdown client and solo cue timers."""

__version__ = "0.3.0"
