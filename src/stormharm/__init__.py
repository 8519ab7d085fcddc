"""Storm Harm: which storm event categories hurt people and property most."""

__version__ = "0.1.0"
