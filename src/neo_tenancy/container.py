"""Component wiring for neo-tenancy.

Every component receives its collaborators through its constructor; the
builders here are the only place that knows which adapters are in use.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from redis.asyncio import Redis

from .config.manager import TenancySettings
from .features.catalog import (
    DEFAULT_PERMISSION_DEFINITIONS,
    AsyncPGPermissionCatalog,
    ModuleRegistry,
    PermissionCatalog,
    build_default_catalog,
    build_default_registry,
)
from .features.database import DatabaseConnection, apply_schema
from .features.memberships import (
    AsyncPGMembershipRepository,
    InMemoryMembershipRepository,
    MembershipRepository,
    MembershipService,
)
from .features.modules import (
    AsyncPGModuleInstallationRepository,
    InMemoryModuleInstallationRepository,
    ModuleActivationService,
    ModuleInstallationRepository,
)
from .features.permissions import (
    AsyncPGRoleRepository,
    AuthorizationChecker,
    InMemoryRoleRepository,
    MemoryRolePermissionCache,
    PermissionResolver,
    RedisRolePermissionCache,
    RolePermissionCache,
    RoleRepository,
    RoleService,
    TenantAccessDependencies,
)
from .features.tenants import (
    AsyncPGTemplateRepository,
    AsyncPGTenantRepository,
    AsyncPGTenantSettingsRepository,
    DocumentTemplate,
    InMemoryTemplateRepository,
    InMemoryTenantRepository,
    InMemoryTenantSettingsRepository,
    TemplateRepository,
    TenantProvisioningSaga,
    TenantRepository,
    TenantService,
    TenantSettingsRepository,
)
from .features.users import AsyncPGUserDirectory, InMemoryUserDirectory, UserDirectory


logger = logging.getLogger(__name__)


@dataclass
class TenancyContainer:
    """Stores and services of one neo-tenancy deployment."""
    
    settings: TenancySettings
    registry: ModuleRegistry
    catalog: PermissionCatalog
    tenants: TenantRepository
    tenant_settings: TenantSettingsRepository
    templates: TemplateRepository
    roles: RoleRepository
    memberships: MembershipRepository
    installations: ModuleInstallationRepository
    users: UserDirectory
    resolver: PermissionResolver
    checker: AuthorizationChecker
    activation: ModuleActivationService
    role_service: RoleService
    membership_service: MembershipService
    provisioning: TenantProvisioningSaga
    tenant_service: TenantService
    permission_cache: Optional[RolePermissionCache] = None
    
    def access_dependencies(self) -> TenantAccessDependencies:
        """FastAPI guards bound to this container's checker."""
        return TenantAccessDependencies(self.checker)


def _assemble(
    settings: TenancySettings,
    registry: ModuleRegistry,
    catalog: PermissionCatalog,
    tenants: TenantRepository,
    tenant_settings: TenantSettingsRepository,
    templates: TemplateRepository,
    roles: RoleRepository,
    memberships: MembershipRepository,
    installations: ModuleInstallationRepository,
    users: UserDirectory,
    cache: Optional[RolePermissionCache],
) -> TenancyContainer:
    resolver = PermissionResolver(
        roles, catalog, cache=cache, cache_ttl=settings.permission_cache_ttl_seconds,
    )
    checker = AuthorizationChecker(users, memberships, roles, resolver, cache=cache)
    activation = ModuleActivationService(installations, registry)
    role_service = RoleService(roles, memberships, resolver)
    
    return TenancyContainer(
        settings=settings,
        registry=registry,
        catalog=catalog,
        tenants=tenants,
        tenant_settings=tenant_settings,
        templates=templates,
        roles=roles,
        memberships=memberships,
        installations=installations,
        users=users,
        resolver=resolver,
        checker=checker,
        activation=activation,
        role_service=role_service,
        membership_service=MembershipService(memberships, roles),
        provisioning=TenantProvisioningSaga(
            tenants, tenant_settings, templates, roles, memberships, installations,
            users, resolver, registry, settings=settings,
        ),
        tenant_service=TenantService(tenants, tenant_settings, activation, role_service, resolver),
        permission_cache=cache,
    )


def build_in_memory_container(
    settings: Optional[TenancySettings] = None,
    registry: Optional[ModuleRegistry] = None,
    catalog: Optional[PermissionCatalog] = None,
    cache: Optional[RolePermissionCache] = None,
    system_templates: Iterable[DocumentTemplate] = (),
) -> TenancyContainer:
    """Process-local deployment, used by tests and single-process tools.
    
    With ``feature_permission_cache`` set and no ``cache`` given, an
    in-process resolved-permission cache is used.
    """
    settings = settings or TenancySettings()
    if cache is None and settings.feature_permission_cache:
        cache = MemoryRolePermissionCache(settings.permission_cache_ttl_seconds)
    
    tenant_settings = InMemoryTenantSettingsRepository()
    templates = InMemoryTemplateRepository(system_templates)
    roles = InMemoryRoleRepository()
    memberships = InMemoryMembershipRepository()
    installations = InMemoryModuleInstallationRepository()
    users = InMemoryUserDirectory()
    tenants = InMemoryTenantRepository(
        dependents=(tenant_settings, templates, roles, memberships, installations, users),
    )
    
    return _assemble(
        settings,
        registry or build_default_registry(),
        catalog or build_default_catalog(),
        tenants, tenant_settings, templates, roles, memberships, installations, users,
        cache,
    )


async def build_postgres_container(
    db: DatabaseConnection,
    redis_client: Optional[Redis] = None,
    settings: Optional[TenancySettings] = None,
    registry: Optional[ModuleRegistry] = None,
    initialize: bool = False,
) -> TenancyContainer:
    """PostgreSQL deployment; Redis caches resolved permissions when given.
    
    With ``initialize`` the schema is applied, the default permission
    definitions are seeded and every existing role is re-resolved
    against them.
    """
    settings = settings or TenancySettings()
    
    cache: Optional[RolePermissionCache] = None
    if redis_client is not None:
        cache = RedisRolePermissionCache(redis_client, settings.permission_cache_ttl_seconds)
    elif settings.feature_permission_cache:
        logger.warning("feature_permission_cache is set but no Redis client was given; caching disabled")
    
    catalog = AsyncPGPermissionCatalog(db)
    if initialize:
        await apply_schema(db)
    
    container = _assemble(
        settings,
        registry or build_default_registry(),
        catalog,
        AsyncPGTenantRepository(db),
        AsyncPGTenantSettingsRepository(db),
        AsyncPGTemplateRepository(db),
        AsyncPGRoleRepository(db),
        AsyncPGMembershipRepository(db),
        AsyncPGModuleInstallationRepository(db),
        AsyncPGUserDirectory(db),
        cache,
    )
    if initialize:
        await container.resolver.reseed_catalog(DEFAULT_PERMISSION_DEFINITIONS)
    
    logger.info(f"Built PostgreSQL tenancy container (permission cache {'on' if cache else 'off'})")
    return container
