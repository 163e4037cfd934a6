"""Services package"""

from .eigen_service import EigenService, get_eigen_service
from .session_service import SessionService, get_session_service, cell_name

__all__ = [
    "EigenService",
    "get_eigen_service",
    "SessionService",
    "get_session_service",
    "cell_name",
]
