"""Tenant provisioning saga.

Creating a tenant writes to several stores that share no transaction:
the tenant record, its settings, the seeded roles, the owner membership,
the creator's active-tenant pointer and the module installations. Each
step is recorded in a ``ProvisioningProgress`` before its first write; if
any step fails, every started step is compensated in reverse order and
the original error is re-raised wrapped in ``TenantProvisioningError``.

Compensations are delete-if-exists on ids generated by the same run, so
a partially applied step can always be undone and rollback can be retried.
A run that is cancelled mid-saga is not compensated.
"""

import asyncio
import logging
from typing import Any, Awaitable, List, Optional

from ....config.constants import (
    TENANT_ID_PREFIX,
    WILDCARD_PERMISSION,
    InitializationStatus,
    SagaState,
    SystemRoleId,
)
from ....config.manager import TenancySettings
from ....core.exceptions import (
    RoleAlreadyExistsError,
    RoleNotFoundError,
    RollbackError,
    StoreTimeoutError,
    TenantAlreadyExistsError,
    TenantProvisioningError,
    ValidationError,
)
from ....utils import calendar_year_bounds, generate_prefixed_id, generate_uuid_v7, utc_now
from ...catalog.entities import ModuleBundle, ModuleRegistry
from ...memberships.entities import Membership, MembershipRepository
from ...modules.entities import IMPLICIT_FLAG, ModuleInstallation, ModuleInstallationRepository
from ...permissions.entities import Role, RoleRepository
from ...permissions.services import PermissionResolver
from ...users.entities import UserDirectory
from ..entities import (
    DocumentTemplate,
    ProvisioningProgress,
    ProvisioningResult,
    SagaStep,
    Tenant,
    TenantProfile,
    TenantRepository,
    TenantSettings,
    TenantSettingsRepository,
    TemplateRepository,
)


logger = logging.getLogger(__name__)


def _dedupe(values: List[str]) -> List[str]:
    return list(dict.fromkeys(v for v in values if v))


def default_roles(tenant_id: str, modules: List[str]) -> List[Role]:
    """The three roles every tenant starts with."""
    return [
        Role(
            tenant_id=tenant_id,
            id=SystemRoleId.OWNER.value,
            name="Owner",
            description="Full access to the company",
            explicit_permissions=[WILDCARD_PERMISSION],
            module_bundles=list(modules),
            is_system=True,
        ),
        Role(
            tenant_id=tenant_id,
            id=SystemRoleId.ADMIN.value,
            name="Administrator",
            description="Access to every installed module",
            explicit_permissions=[],
            module_bundles=list(modules),
            is_system=True,
        ),
        Role(
            tenant_id=tenant_id,
            id=SystemRoleId.MEMBER.value,
            name="Member",
            description="Basic access",
            is_system=False,
        ),
    ]


class TenantProvisioningSaga:
    """Creates a tenant with its roles, owner membership and modules."""
    
    def __init__(
        self,
        tenant_repository: TenantRepository,
        settings_repository: TenantSettingsRepository,
        template_repository: TemplateRepository,
        role_repository: RoleRepository,
        membership_repository: MembershipRepository,
        installation_repository: ModuleInstallationRepository,
        user_directory: UserDirectory,
        resolver: PermissionResolver,
        registry: ModuleRegistry,
        settings: Optional[TenancySettings] = None,
    ):
        self._tenants = tenant_repository
        self._tenant_settings = settings_repository
        self._templates = template_repository
        self._roles = role_repository
        self._memberships = membership_repository
        self._installations = installation_repository
        self._users = user_directory
        self._resolver = resolver
        self._registry = registry
        self._settings = settings or TenancySettings()
    
    async def create_tenant(
        self,
        creator_user_id: str,
        name: str,
        bundle_id: str,
        profile: Optional[TenantProfile] = None,
    ) -> str:
        """Provision a tenant and return its id."""
        result = await self.provision(creator_user_id, name, bundle_id, profile)
        return result.tenant_id
    
    async def provision(
        self,
        creator_user_id: str,
        name: str,
        bundle_id: str,
        profile: Optional[TenantProfile] = None,
    ) -> ProvisioningResult:
        """Run every provisioning step and report what was created.
        
        Raises:
            ValidationError: missing input or unknown bundle; nothing was written
            TenantAlreadyExistsError: the creator already owns a tenant with this name
            TenantProvisioningError: a later step failed and rollback was attempted
        """
        profile = profile or TenantProfile()
        progress = ProvisioningProgress()
        name = (name or "").strip()
        
        try:
            # 1. Duplicate-name guard
            if not creator_user_id:
                raise ValidationError("Creator user id is required")
            if not name:
                raise ValidationError("Tenant name is required")
            existing = await self._call(
                "find tenant by name", self._tenants.find_by_name_and_owner(name, creator_user_id)
            )
            if existing is not None:
                raise TenantAlreadyExistsError(
                    f"You already own a company named '{name}'",
                    details={"owner_id": creator_user_id, "name": name, "tenant_id": existing.id},
                )
            
            # 2. Bundle lookup
            bundle = self._registry.require_bundle(bundle_id)
        except Exception:
            progress.transition(SagaState.FAILED)
            raise
        
        modules = _dedupe([*bundle.modules_included, self._settings.mandatory_module])
        progress.tenant_id = generate_prefixed_id(TENANT_ID_PREFIX)
        progress.modules = modules
        
        try:
            await self._create_tenant(progress, creator_user_id, name, bundle, profile)
        except TenantAlreadyExistsError:
            # Lost the (owner, name) race; the store rejected the write atomically
            progress.transition(SagaState.FAILED)
            raise
        except Exception as e:
            await self._fail(progress, creator_user_id, e)
        
        try:
            await self._seed_settings(progress, profile)
            await self._seed_roles(progress)
            await self._resolve_seeded_roles(progress)
            await self._assign_owner(progress, creator_user_id)
            await self._set_active_tenant(progress, creator_user_id)
            await self._create_modules(progress)
        except Exception as e:
            await self._fail(progress, creator_user_id, e)
        
        templates_copied = await self._copy_templates(progress.tenant_id)
        progress.transition(SagaState.COMPLETE)
        
        logger.info(
            f"Provisioned tenant {progress.tenant_id} ({name}) for user {creator_user_id} "
            f"with modules {', '.join(modules)}"
        )
        return ProvisioningResult(
            tenant_id=progress.tenant_id,
            modules=list(modules),
            role_ids=[role_id.value for role_id in SystemRoleId],
            state=progress.state,
            templates_copied=templates_copied,
        )
    
    async def _call(self, operation: str, awaitable: Awaitable[Any]) -> Any:
        """Await one store call under the per-step timeout."""
        timeout = self._settings.step_timeout
        try:
            return await asyncio.wait_for(awaitable, timeout=timeout)
        except asyncio.TimeoutError:
            raise StoreTimeoutError(
                f"Store call '{operation}' timed out after {timeout}s",
                details={"operation": operation, "timeout_seconds": timeout},
            )
    
    # 3. Tenant record
    async def _create_tenant(
        self,
        progress: ProvisioningProgress,
        creator_user_id: str,
        name: str,
        bundle: ModuleBundle,
        profile: TenantProfile,
    ) -> None:
        year_start, year_end = calendar_year_bounds(utc_now().year)
        tenant = Tenant(
            id=progress.tenant_id,
            owner_id=creator_user_id,
            name=name,
            base_currency=profile.base_currency or self._settings.default_currency,
            fiscal_year_start=profile.fiscal_year_start or year_start,
            fiscal_year_end=profile.fiscal_year_end or year_end,
            modules=list(progress.modules),
            bundle_id=bundle.id,
            subscription_plan=bundle.name,
            country=profile.country,
            description=profile.description,
            contact_email=profile.contact_email,
            logo_url=profile.logo_url,
        )
        
        progress.start(SagaStep.CREATE_TENANT)
        await self._call("create tenant", self._tenants.create(tenant))
        progress.complete(SagaStep.CREATE_TENANT)
        progress.transition(SagaState.TENANT_CREATED)
        logger.info(f"Created tenant record {tenant.id}")
    
    # 4. Settings
    async def _seed_settings(self, progress: ProvisioningProgress, profile: TenantProfile) -> None:
        settings = TenantSettings(
            tenant_id=progress.tenant_id,
            timezone=profile.timezone or self._settings.default_timezone,
            date_format=profile.date_format or self._settings.default_date_format,
            language=profile.language or self._settings.default_language,
            ui_mode=self._settings.ui_mode,
        )
        
        progress.start(SagaStep.SEED_SETTINGS)
        await self._call("seed settings", self._tenant_settings.save(settings))
        progress.complete(SagaStep.SEED_SETTINGS)
    
    # 5. Roles
    async def _seed_roles(self, progress: ProvisioningProgress) -> None:
        progress.start(SagaStep.SEED_ROLES)
        for role in default_roles(progress.tenant_id, progress.modules):
            existing = await self._call("get role", self._roles.get(role.tenant_id, role.id))
            if existing is not None:
                logger.debug(f"Role {role.id} already exists in tenant {role.tenant_id}, skipping")
                continue
            try:
                await self._call("create role", self._roles.create(role))
            except RoleAlreadyExistsError:
                logger.debug(f"Role {role.id} was created concurrently in tenant {role.tenant_id}")
        
        progress.complete(SagaStep.SEED_ROLES)
        progress.transition(SagaState.ROLES_CREATED)
    
    # 6. Resolution
    async def _resolve_seeded_roles(self, progress: ProvisioningProgress) -> None:
        for role_id in (SystemRoleId.OWNER.value, SystemRoleId.ADMIN.value):
            resolved = await self._call(
                "resolve role permissions", self._resolver.resolve_one(progress.tenant_id, role_id)
            )
            if not resolved:
                raise RoleNotFoundError(
                    f"Seeded role {role_id} disappeared from tenant {progress.tenant_id}",
                    details={"tenant_id": progress.tenant_id, "role_id": role_id},
                )
    
    # 7. Owner membership
    async def _assign_owner(self, progress: ProvisioningProgress, creator_user_id: str) -> None:
        membership = Membership(
            tenant_id=progress.tenant_id,
            user_id=creator_user_id,
            role_id=SystemRoleId.OWNER.value,
            is_owner=True,
        )
        
        progress.start(SagaStep.ASSIGN_OWNER)
        await self._call("assign owner", self._memberships.create(membership))
        progress.complete(SagaStep.ASSIGN_OWNER)
        progress.transition(SagaState.MEMBERSHIP_ASSIGNED)
    
    # 8. Active tenant (best-effort)
    async def _set_active_tenant(self, progress: ProvisioningProgress, creator_user_id: str) -> None:
        try:
            progress.previous_active_tenant = await self._call(
                "get active tenant", self._users.get_active_tenant(creator_user_id)
            )
            progress.start(SagaStep.SET_ACTIVE_TENANT)
            await self._call(
                "set active tenant", self._users.set_active_tenant(creator_user_id, progress.tenant_id)
            )
            progress.complete(SagaStep.SET_ACTIVE_TENANT)
        except Exception as e:
            logger.warning(f"Failed to set active tenant {progress.tenant_id} for user {creator_user_id}: {e}")
    
    # 9. Module installations
    async def _create_modules(self, progress: ProvisioningProgress) -> None:
        installations = [
            ModuleInstallation(
                tenant_id=progress.tenant_id,
                module_code=code,
                initialized=False,
                initialization_status=InitializationStatus.PENDING,
                config={IMPLICIT_FLAG: False},
            )
            for code in progress.modules
        ]
        
        progress.start(SagaStep.CREATE_MODULES)
        await self._call("create modules", self._installations.batch_create(installations))
        progress.complete(SagaStep.CREATE_MODULES)
        progress.transition(SagaState.MODULES_CREATED)
    
    # 10. Templates (best-effort, never rolled back)
    async def _copy_templates(self, tenant_id: str) -> int:
        copied = 0
        try:
            templates = await self._call("list system templates", self._templates.list_system_templates())
            for template in templates:
                await self._call("copy template", self._templates.create(DocumentTemplate(
                    id=generate_uuid_v7(),
                    code=template.code,
                    name=template.name,
                    tenant_id=tenant_id,
                    payload=dict(template.payload),
                )))
                copied += 1
        except Exception as e:
            logger.warning(f"Failed to copy system templates into tenant {tenant_id} after {copied} copies: {e}")
        return copied
    
    async def _fail(self, progress: ProvisioningProgress, creator_user_id: str, error: Exception) -> None:
        """Roll back and raise ``TenantProvisioningError`` chained to ``error``."""
        logger.error(
            f"Provisioning of tenant {progress.tenant_id} failed in state {progress.state.value}: {error}"
        )
        progress.transition(SagaState.ROLLING_BACK)
        rollback_errors = await self._rollback(progress, creator_user_id)
        progress.transition(SagaState.FAILED)
        
        if rollback_errors:
            logger.critical(
                f"Rollback of tenant {progress.tenant_id} is incomplete; "
                f"failed compensations: {', '.join(err.step for err in rollback_errors)}. "
                f"Manual cleanup required."
            )
            message = (
                f"Tenant creation failed: {error}. Rollback was incomplete; "
                f"an operator must reconcile the partial state."
            )
        else:
            message = f"Tenant creation failed: {error}. Rollback completed."
        
        raise TenantProvisioningError(
            message,
            rollback_errors=rollback_errors,
            completed_steps=[step.value for step in progress.completed],
            details={"tenant_id": progress.tenant_id},
        ) from error
    
    async def _rollback(self, progress: ProvisioningProgress, creator_user_id: str) -> List[RollbackError]:
        """Compensate every started step in reverse order."""
        tenant_id = progress.tenant_id
        errors: List[RollbackError] = []
        
        async def compensate(step: str, awaitable: Awaitable[Any]) -> None:
            try:
                await self._call(step, awaitable)
            except Exception as e:
                logger.error(f"Rollback step '{step}' failed for tenant {tenant_id}: {e}")
                errors.append(RollbackError(step, e))
        
        if progress.was_started(SagaStep.CREATE_MODULES):
            for code in reversed(progress.modules):
                await compensate(f"delete module {code}", self._installations.delete(tenant_id, code))
        
        if progress.was_started(SagaStep.SET_ACTIVE_TENANT):
            await compensate("restore active tenant", self._restore_active_tenant(progress, creator_user_id))
        
        if progress.was_started(SagaStep.ASSIGN_OWNER):
            await compensate("delete owner membership", self._memberships.delete(tenant_id, creator_user_id))
        
        if progress.was_started(SagaStep.SEED_ROLES):
            for role_id in reversed([role_id.value for role_id in SystemRoleId]):
                await compensate(f"delete role {role_id}", self._roles.delete(tenant_id, role_id))
        
        if progress.was_started(SagaStep.SEED_SETTINGS):
            await compensate("delete settings", self._tenant_settings.delete_for_tenant(tenant_id))
        
        if progress.was_started(SagaStep.CREATE_TENANT):
            await compensate("delete tenant", self._tenants.delete(tenant_id))
        
        if not errors:
            logger.info(f"Rolled back tenant {tenant_id}")
        return errors
    
    async def _restore_active_tenant(self, progress: ProvisioningProgress, creator_user_id: str) -> None:
        restored = await self._users.restore_active_tenant(
            creator_user_id, progress.tenant_id, progress.previous_active_tenant
        )
        if not restored:
            logger.debug(f"Active tenant of user {creator_user_id} moved off {progress.tenant_id}; left as is")
