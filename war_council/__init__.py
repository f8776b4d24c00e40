"""Imperial War Council - AI advisors who react to the players' plans."""

__version__ = "0.1.0"
