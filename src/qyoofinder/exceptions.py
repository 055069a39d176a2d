"""Exception hierarchy for qyoofinder."""


class QyooFinderError(Exception):
    """Base exception for all qyoofinder errors."""

    pass


class RasterError(QyooFinderError):
    """Errors related to raster input."""

    pass


class InvalidRasterError(RasterError):
    """Raster has unusable dimensions or layout."""

    def __init__(self, width: int, height: int, reason: str) -> None:
        self.width = width
        self.height = height
        self.reason = reason
        super().__init__(f"Invalid raster {width}x{height}: {reason}")


class CodeError(QyooFinderError):
    """Errors related to marker code encoding."""

    pass


class CodeCapacityError(CodeError):
    """Code vector does not fit the 64-bit decimal encoding."""

    def __init__(self, byte_count: int, max_bytes: int) -> None:
        self.byte_count = byte_count
        self.max_bytes = max_bytes
        super().__init__(
            f"Code of {byte_count} bytes exceeds capacity of {max_bytes} bytes"
        )


class ImageError(QyooFinderError):
    """Errors related to image loading or saving."""

    pass


class ImageLoadError(ImageError):
    """Error loading an image file."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load image '{path}': {reason}")


class ImageSaveError(ImageError):
    """Error saving an image file."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to save image '{path}': {reason}")
