"""
Exception handlers for FastAPI applications built on neo-tenancy.

Every NeoTenancyError is rendered as the standard error envelope with the
status code from the HTTP status map.
"""
from typing import Dict, Any, Optional, Callable
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
import logging

from ..core.exceptions import NeoTenancyError, create_error_response, get_http_status_code

logger = logging.getLogger(__name__)


class ExceptionHandlerRegistry:
    """Registers the neo-tenancy exception handlers on an application."""
    
    def __init__(
        self,
        response_formatter: Optional[Callable[[NeoTenancyError], Dict[str, Any]]] = None,
        is_production: bool = True
    ):
        """
        Initialize exception handler registry.
        
        Args:
            response_formatter: Function rendering an error into a response body
            is_production: Hide messages of unexpected errors when True
        """
        self.response_formatter = response_formatter or create_error_response
        self.is_production = is_production
    
    def register_handlers(self, app: FastAPI) -> None:
        """Register exception handlers for the application.
        
        Args:
            app: FastAPI application instance
        """
        @app.exception_handler(NeoTenancyError)
        async def neo_tenancy_error_handler(request: Request, exc: NeoTenancyError):
            """Handle neo-tenancy exceptions."""
            status_code = get_http_status_code(exc)
            if status_code >= 500:
                logger.error(f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}")
            return JSONResponse(
                status_code=status_code,
                content=self.response_formatter(exc)
            )
        
        @app.exception_handler(Exception)
        async def general_exception_handler(request: Request, exc: Exception):
            """Handle unexpected exceptions."""
            logger.error(f"Unhandled exception: {exc}", exc_info=True)
            
            if self.is_production:
                message = "An unexpected error occurred"
            else:
                message = str(exc)
            
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=self.response_formatter(NeoTenancyError(message, error_code="INTERNAL_ERROR"))
            )


def register_exception_handlers(
    app: FastAPI,
    response_formatter: Optional[Callable[[NeoTenancyError], Dict[str, Any]]] = None,
    is_production: bool = True
) -> None:
    """
    Register neo-tenancy exception handlers on a FastAPI application.
    
    Args:
        app: FastAPI application instance
        response_formatter: Custom response formatter function
        is_production: Whether running in production mode
    """
    registry = ExceptionHandlerRegistry(response_formatter, is_production)
    registry.register_handlers(app)
