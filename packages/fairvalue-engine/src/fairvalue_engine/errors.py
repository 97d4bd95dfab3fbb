class InputShapeError(ValueError):
    """Raised when input is not an iterable of record-like values.

    Never raised for bad or missing field content; that is modelled as ``None``.
    """
