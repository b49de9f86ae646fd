"""pomhoist: enforce Maven dependency version management in root poms."""

__version__ = "0.1.0"
