"""Exceptions raised by the suitability pipeline."""


class SuitabilityError(ValueError):
    """Base error for the suitability pipeline."""


class InputDataError(SuitabilityError):
    """An input file or dataset is missing, malformed or lacks a CRS."""

    def __init__(self, input_name: str, message: str) -> None:
        self.input_name = input_name
        super().__init__(f"{input_name}: {message}")


class AlignmentError(SuitabilityError):
    """Resampled grids do not share CRS, extent or resolution."""
