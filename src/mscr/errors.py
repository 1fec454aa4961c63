"""Errors raised while preparing capture-recapture data."""


class MSCRError(ValueError):
    """Base class for data preparation errors."""


class ShapeMismatch(MSCRError):
    """Capture and test matrices differ in dimensions."""

    def __init__(self, capture_shape: tuple, test_shape: tuple):
        self.capture_shape = tuple(capture_shape)
        self.test_shape = tuple(test_shape)
        super().__init__(
            f"Capture matrix has shape {self.capture_shape} but test matrix "
            f"has shape {self.test_shape}"
        )


class NeverDetected(MSCRError):
    """One or more individuals have no detection at any occasion."""

    def __init__(self, rows):
        self.rows = [int(r) for r in rows]
        shown = ", ".join(str(r) for r in self.rows[:10])
        more = f" (+{len(self.rows) - 10} more)" if len(self.rows) > 10 else ""
        super().__init__(
            f"{len(self.rows)} individual(s) never detected, rows: {shown}{more}"
        )


class InvalidValue(MSCRError):
    """Input matrix entry outside {0, 1, missing}."""

    def __init__(self, row: int, col: int, value: float, name: str = "matrix"):
        self.row = int(row)
        self.col = int(col)
        self.value = value
        self.name = name
        super().__init__(
            f"Invalid value {value!r} in {name} at row {self.row}, "
            f"column {self.col}; expected 0, 1 or missing"
        )
