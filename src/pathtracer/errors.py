"""Exception types raised by the path tracer.

Geometric degeneracies (rays that miss, zero-length scatter directions) are
never reported as errors; they degrade to a miss or a substitute direction.
Only invalid configuration and cancellation surface as exceptions.
"""


class PathTracerError(Exception):
    """Base class for all path tracer errors."""


class ConfigurationError(PathTracerError, ValueError):
    """Raised when a scene, camera, material or render parameter is invalid.

    Validation happens eagerly at construction or render invocation time,
    before any rendering work begins.
    """


class RenderCancelledError(PathTracerError, RuntimeError):
    """Raised when a render is aborted through its cancel event.

    Attributes:
        rows_completed: Number of image rows finished before cancellation.
    """

    def __init__(self, rows_completed: int, height: int) -> None:
        self.rows_completed = rows_completed
        self.height = height
        super().__init__(f"Render cancelled after {rows_completed}/{height} rows")
