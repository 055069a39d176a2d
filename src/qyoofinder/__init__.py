"""qyoofinder - Locate and decode Qyoo fiducial markers in still images.

qyoofinder finds the marker outline (a square corner on one side and a
270 degree arc on the other) in a grayscale photograph, fits an affine
transform from the canonical marker space onto the image, and reads the
enclosed dot grid as a numeric code.

Example:
    $ qyoofinder photo.jpg

This prints every marker found in photo.jpg together with its decoded code.
"""

__version__ = "0.1.0"
__author__ = "Dimosthenis Kaponis"

__all__ = ["__author__", "__version__"]
