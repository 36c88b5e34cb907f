from .slices import make_slice_overview, mid_slices

__all__ = ["make_slice_overview", "mid_slices"]
