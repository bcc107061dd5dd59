"""Tenant domain entities for the tenants feature.

A tenant ("company") is created once by the provisioning saga. Its
``modules`` list mirrors the installed modules for convenience; the
module installation records are authoritative.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field


@dataclass
class Tenant:
    """Domain entity representing a tenant."""
    
    id: str
    owner_id: str
    name: str
    base_currency: str
    fiscal_year_start: date
    fiscal_year_end: date
    modules: List[str] = field(default_factory=list)
    bundle_id: Optional[str] = None
    subscription_plan: Optional[str] = None
    country: Optional[str] = None
    description: Optional[str] = None
    contact_email: Optional[str] = None
    logo_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    
    def __str__(self) -> str:
        return f"Tenant({self.id}, {self.name})"


@dataclass
class TenantProfile:
    """Optional caller-supplied fields for tenant creation."""
    
    base_currency: Optional[str] = None
    country: Optional[str] = None
    description: Optional[str] = None
    contact_email: Optional[str] = None
    logo_url: Optional[str] = None
    fiscal_year_start: Optional[date] = None
    fiscal_year_end: Optional[date] = None
    timezone: Optional[str] = None
    date_format: Optional[str] = None
    language: Optional[str] = None


@dataclass
class TenantSettings:
    """Tenant-local presentation settings seeded at creation."""
    
    tenant_id: str
    timezone: str
    date_format: str
    language: str
    ui_mode: str
    extra: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class DocumentTemplate:
    """A document template; system templates have no tenant."""
    
    id: str
    code: str
    name: str
    tenant_id: Optional[str] = None
    payload: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    
    @property
    def is_system(self) -> bool:
        return self.tenant_id is None
