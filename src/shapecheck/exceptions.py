"""
Custom exception classes for shapecheck.

Checkers themselves never raise for any input value; these exceptions cover
composition misuse, manifest loading and the raising validation helpers.
"""


class ShapeCheckError(Exception):
    """Base exception for all shapecheck errors."""
    pass


class ShapeDefinitionError(ShapeCheckError, TypeError):
    """A shape was composed from something that is not a checker."""

    def __init__(self, message: str, property_name: str = None):
        self.message = message
        self.property_name = property_name
        if property_name is not None:
            super().__init__(f"Invalid shape definition at '{property_name}': {message}")
        else:
            super().__init__(f"Invalid shape definition: {message}")


class ManifestLoadError(ShapeCheckError):
    """Error loading a shape manifest file."""

    def __init__(self, file_name: str, message: str):
        self.file_name = file_name
        self.message = message
        super().__init__(f"Error loading {file_name}: {message}")


class ShapeMismatchError(ShapeCheckError, ValueError):
    """A value did not conform to the expected shape."""

    def __init__(self, label: str, shape: str = None):
        self.label = label
        self.shape = shape
        if shape:
            super().__init__(f"{label} does not conform to shape '{shape}'")
        else:
            super().__init__(f"{label} does not conform to the expected shape")
