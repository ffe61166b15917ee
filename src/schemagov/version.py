"""Version information for :mod:`schemagov`."""

VERSION = "1.0.0"
