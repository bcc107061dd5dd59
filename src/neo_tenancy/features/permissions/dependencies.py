"""FastAPI route guards backed by the authorization checker."""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException, Request, status

from ...config.constants import Headers
from ...core.exceptions import PermissionDeniedError
from .services.authorization_checker import AccessDecision, AuthorizationChecker


logger = logging.getLogger(__name__)


class TenantAccessError(HTTPException):
    """HTTP error raised by the tenant access guards."""
    
    def __init__(self, detail: str, status_code: int = status.HTTP_403_FORBIDDEN):
        super().__init__(status_code=status_code, detail=detail)


@dataclass(frozen=True)
class TenantAccessContext:
    """The actor and tenant a request was authorized for."""
    
    actor_id: str
    tenant_id: str
    decision: AccessDecision


class TenantAccessDependencies:
    """FastAPI dependency factory for tenant permission checks.
    
    The actor comes from ``request.state.user_id`` (set by an upstream
    authentication middleware) or the ``X-User-ID`` header. The tenant
    comes from a ``tenant_id`` path parameter or the ``X-Tenant-ID`` header.
    """
    
    def __init__(self, checker: AuthorizationChecker):
        self._checker = checker
    
    @staticmethod
    def get_actor_id(request: Request) -> str:
        actor_id: Optional[str] = getattr(request.state, "user_id", None) or request.headers.get(Headers.USER_ID)
        if not actor_id:
            raise TenantAccessError("Authentication required", status_code=status.HTTP_401_UNAUTHORIZED)
        return actor_id
    
    @staticmethod
    def get_tenant_id(request: Request) -> str:
        tenant_id: Optional[str] = request.path_params.get("tenant_id") or request.headers.get(Headers.TENANT_ID)
        if not tenant_id:
            raise TenantAccessError(
                f"Tenant is required ({Headers.TENANT_ID} header)",
                status_code=status.HTTP_400_BAD_REQUEST,
            )
        return tenant_id
    
    def require_permission(self, permission: str):
        """Require a permission inside the request's tenant."""
        
        async def dependency(request: Request) -> TenantAccessContext:
            actor_id = self.get_actor_id(request)
            tenant_id = self.get_tenant_id(request)
            try:
                decision = await self._checker.must_authorize(actor_id, tenant_id, permission)
            except PermissionDeniedError as e:
                logger.warning(f"User {actor_id} lacks permission {permission} in tenant {tenant_id}")
                raise TenantAccessError(e.message)
            return TenantAccessContext(actor_id, tenant_id, decision)
        
        return dependency
    
    def require_owner_or_permission(self, permission: str):
        """Administrative guard: the tenant owner, a global admin, or one named permission."""
        
        async def dependency(request: Request) -> TenantAccessContext:
            actor_id = self.get_actor_id(request)
            tenant_id = self.get_tenant_id(request)
            try:
                decision = await self._checker.owner_or_permission(actor_id, tenant_id, permission)
            except PermissionDeniedError as e:
                logger.warning(f"User {actor_id} is neither owner nor holds {permission} in tenant {tenant_id}")
                raise TenantAccessError(e.message)
            return TenantAccessContext(actor_id, tenant_id, decision)
        
        return dependency
