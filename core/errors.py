"""Typed failures raised by the enclosure pipeline."""


class EnclosureError(Exception):
    """Base class for every enclosure generation failure."""


class InvalidDimension(EnclosureError, ValueError):
    """A dimensional parameter is non-finite, non-positive or inconsistent."""

    def __init__(self, name: str, value, reason: str = "must be a finite positive number"):
        self.name = name
        self.value = value
        super().__init__(f"Invalid dimension '{name}' = {value!r}: {reason}")


class DoorDoesNotFit(EnclosureError, ValueError):
    """The front wall cannot admit the door opening plus its side margins."""


class CSGFailure(EnclosureError, RuntimeError):
    """The boolean backend failed or returned a degenerate solid."""


class AssetLoadFailure(EnclosureError, IOError):
    """A texture, model, font or cubemap could not be loaded."""
