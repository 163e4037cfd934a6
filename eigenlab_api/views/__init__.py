"""HTML views package"""

from .page import render_page

__all__ = ["render_page"]
