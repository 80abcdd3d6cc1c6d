"""Camera module for view and ray generation.

Components:
    thin_lens: Camera description with depth of field
    rays: Device-side camera state and primary ray generation
        (import after ti.init)

Ray generation uses normalized image coordinates:
    s in [0, 1]: left to right across the image
    t in [0, 1]: bottom to top across the image
"""

from .thin_lens import ThinLensCamera

__all__ = ["ThinLensCamera"]
