class PropertySetError(Exception):
    """Base class for all errors raised while decoding OLE property sets."""

    def __init__(self, message: str = None, *, cause: Exception = None):
        if message is None:
            message = "Failed to decode OLE property set"
        super().__init__(message)
        self.__cause__ = cause  # Optional chaining for debugging


class PropertySetStructureError(PropertySetError):
    """Raised when the stream layout is broken (truncated data, offsets
    pointing outside the buffer). Aborts the whole decode."""


class PropertySetFormatError(PropertySetStructureError):
    """Raised when a header field holds a value the format does not allow."""


class PropertySetLimitError(PropertySetStructureError):
    """Raised when a count read from the input exceeds the configured limits."""

    def __init__(self, what: str, count: int, limit: int, *, cause: Exception = None):
        self.what = what
        self.count = count
        self.limit = limit
        super().__init__(f"{what} too large ({count} > {limit})", cause=cause)


class UnsupportedPropertyTypeError(PropertySetError):
    """Raised when a VT type tag has no value reader. The property is skipped."""

    def __init__(self, type_tag: int, message: str = None, *, cause: Exception = None):
        self.type_tag = type_tag
        if message is None:
            message = f"Unsupported property type: 0x{type_tag:04X}"
        super().__init__(message, cause=cause)


class UnsupportedDimensionError(PropertySetError):
    """Raised for array shaped values, which cannot be read. The property is skipped."""


class ValueDecodeError(PropertySetError):
    """Raised when a single scalar cannot be turned into a value
    (undecodable text, timestamp out of range). The value becomes absent."""


class NotAnOleFileError(PropertySetError):
    """Raised when the input is not a Compound File Binary container."""

    def __init__(self, path: str | None = None, *, cause: Exception = None):
        self.path = path
        message = "Not a valid OLE2 compound file"
        if path:
            message = f"{message}: {path}"
        super().__init__(message, cause=cause)
