"""Surface registry for posturemax."""

from posturemax.surfaces.registry import SurfaceListener, SurfaceRegistry

__all__ = ["SurfaceListener", "SurfaceRegistry"]
