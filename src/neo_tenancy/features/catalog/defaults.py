"""Default module, bundle and permission catalog shipped with the platform."""

from typing import Dict, List, Tuple

from .entities.definitions import (
    ModuleBundle,
    ModuleDescriptor,
    ModulePermissionDefinition,
    PermissionDefinition,
)
from .entities.registry import ModuleRegistry
from .repositories.static_catalog import StaticPermissionCatalog


ADMIN_MODULE = "companyAdmin"


DEFAULT_MODULES: List[ModuleDescriptor] = [
    ModuleDescriptor("accounting", "Accounting", "Chart of accounts, vouchers and financial reports"),
    ModuleDescriptor("inventory", "Inventory", "Items, warehouses and stock"),
    ModuleDescriptor("hr", "Human Resources", "Employees, attendance and payroll"),
    ModuleDescriptor("crm", "CRM", "Leads and customers"),
    ModuleDescriptor("pos", "Point of Sale", "POS terminals and sessions"),
    ModuleDescriptor("manufacturing", "Manufacturing", "Work orders and bills of materials"),
    ModuleDescriptor("projects", "Projects", "Projects and tasks"),
    ModuleDescriptor("purchase", "Purchasing", "Vendors"),
    ModuleDescriptor("sales", "Sales", "Sales orders and invoices"),
    ModuleDescriptor("procurement", "Procurement", "Purchase requests and approvals"),
    ModuleDescriptor(ADMIN_MODULE, "Company Administration", "Users, roles and company settings"),
    ModuleDescriptor("system", "System", "Platform-level administration"),
]


# Module code -> modules it requires
DEFAULT_DEPENDENCIES: Dict[str, List[str]] = {
    "hr": ["accounting"],
    "sales": ["accounting"],
    "inventory": ["accounting"],
    "procurement": ["accounting", "inventory"],
}


def _perms(*entries: Tuple[str, str]) -> Tuple[PermissionDefinition, ...]:
    return tuple(PermissionDefinition(id=pid, label=label) for pid, label in entries)


DEFAULT_PERMISSION_DEFINITIONS: List[ModulePermissionDefinition] = [
    ModulePermissionDefinition(
        module_id="accounting",
        permissions=_perms(
            ("accounting.accounts.view", "View Chart of Accounts"),
            ("accounting.accounts.create", "Create Accounts"),
            ("accounting.accounts.edit", "Edit Accounts"),
            ("accounting.accounts.delete", "Delete Accounts"),
            ("accounting.vouchers.view", "View Vouchers"),
            ("accounting.vouchers.create", "Create Vouchers"),
            ("accounting.vouchers.edit", "Edit Vouchers"),
            ("accounting.vouchers.delete", "Delete Vouchers"),
            ("accounting.vouchers.approve", "Approve Vouchers"),
            ("accounting.vouchers.post", "Post Vouchers"),
            ("accounting.vouchers.lock", "Lock Vouchers"),
            ("accounting.vouchers.cancel", "Cancel Vouchers"),
            ("accounting.vouchers.correct", "Correct Vouchers"),
            ("accounting.reports.profitAndLoss.view", "View Profit & Loss"),
            ("accounting.reports.trialBalance.view", "View Trial Balance"),
            ("accounting.reports.generalLedger.view", "View General Ledger"),
            ("accounting.designer.view", "View Designer"),
            ("accounting.designer.create", "Create Voucher Types"),
            ("accounting.designer.modify", "Modify Voucher Types"),
            ("accounting.settings", "Manage Accounting Settings"),
        ),
    ),
    ModulePermissionDefinition(
        module_id="inventory",
        permissions=_perms(
            ("inventory.items.view", "View Items"),
            ("inventory.items.create", "Create Items"),
            ("inventory.items.manage", "Manage Items"),
            ("inventory.warehouses.view", "View Warehouses"),
            ("inventory.warehouses.create", "Create Warehouses"),
            ("inventory.stock.view", "View Stock"),
            ("inventory.settings", "Inventory Settings"),
        ),
    ),
    ModulePermissionDefinition(
        module_id="hr",
        permissions=_perms(
            ("hr.employees.view", "View Employees"),
            ("hr.attendance.view", "View Attendance"),
            ("hr.payroll.view", "View Payroll"),
        ),
    ),
    ModulePermissionDefinition(
        module_id="crm",
        permissions=_perms(
            ("crm.leads.view", "View Leads"),
            ("crm.customers.view", "View Customers"),
        ),
    ),
    ModulePermissionDefinition(
        module_id="pos",
        permissions=_perms(
            ("pos.terminal.access", "Access POS Terminal"),
            ("pos.sessions.view", "View POS Sessions"),
        ),
    ),
    ModulePermissionDefinition(
        module_id="manufacturing",
        permissions=_perms(
            ("manufacturing.workOrders.view", "View Work Orders"),
            ("manufacturing.bom.view", "View BoM"),
        ),
    ),
    ModulePermissionDefinition(
        module_id="projects",
        permissions=_perms(
            ("projects.view", "View Projects"),
            ("projects.tasks.view", "View Tasks"),
        ),
    ),
    ModulePermissionDefinition(
        module_id="purchase",
        permissions=_perms(
            ("purchase.vendors.view", "View Vendors"),
        ),
    ),
    ModulePermissionDefinition(
        module_id="sales",
        permissions=_perms(
            ("sales.orders.view", "View Sales Orders"),
            ("sales.orders.create", "Create Sales Orders"),
            ("sales.invoices.view", "View Invoices"),
        ),
    ),
    ModulePermissionDefinition(
        module_id="procurement",
        permissions=_perms(
            ("procurement.requests.view", "View Purchase Requests"),
            ("procurement.requests.create", "Create Purchase Requests"),
            ("procurement.orders.approve", "Approve Purchase Orders"),
        ),
    ),
    ModulePermissionDefinition(
        module_id=ADMIN_MODULE,
        permissions=_perms(
            ("companyAdmin.settings.manage", "Manage Settings"),
            ("companyAdmin.audit.view", "View Audit Logs"),
            ("companyAdmin.users.manage", "Manage Users"),
            ("companyAdmin.roles.manage", "Manage Roles"),
        ),
    ),
    ModulePermissionDefinition(
        module_id="system",
        permissions=_perms(
            ("system.roles.manage", "Manage Roles"),
            ("system.company.manage", "Manage Company"),
            ("system.company.settings.manage", "Manage Company Settings"),
            ("system.users.manage", "Manage Users"),
            ("system.audit.view", "View Audit Logs"),
        ),
    ),
]


DEFAULT_BUNDLES: List[ModuleBundle] = [
    ModuleBundle("starter", "Starter", ("accounting", "inventory"), "Accounting with stock control."),
    ModuleBundle("trading-basic", "General Trading", ("accounting", "inventory"),
                 "Suitable for normal trading companies.", ("trading",)),
    ModuleBundle("trading-plus", "General Trading +", ("accounting", "inventory", "hr"),
                 "Trading company with HR support.", ("trading",)),
    ModuleBundle("retail-pos", "Retail / POS", ("pos", "inventory", "accounting"),
                 "For retail shops and supermarkets.", ("retail",)),
    ModuleBundle("wholesale", "Wholesale Trading", ("inventory", "crm", "accounting", "purchase"),
                 "For wholesalers and distribution companies.", ("trading", "distribution")),
    ModuleBundle("services", "Services Company", ("crm", "hr", "accounting"),
                 "For IT, consulting, maintenance, etc.", ("services",)),
    ModuleBundle("restaurant", "Restaurant", ("pos", "inventory", "hr", "accounting"),
                 "POS + Inventory + HR for restaurants.", ("hospitality",)),
    ModuleBundle("manufacturing-basic", "Manufacturing - Basic", ("inventory", "manufacturing", "accounting"),
                 "For small manufacturers.", ("manufacturing",)),
    ModuleBundle("construction", "Construction / Contracting", ("projects", "accounting", "hr", "inventory"),
                 "Contractors, builders, and project companies.", ("construction",)),
    ModuleBundle("freelancer", "Freelancer / Solo Entrepreneur", ("accounting", "crm"),
                 "For individual freelancers.", ("services",)),
    ModuleBundle("empty-company", "Empty Company", (),
                 "Start with no modules and configure manually."),
]


def build_default_registry() -> ModuleRegistry:
    """Module registry over the default modules, bundles and dependencies."""
    return ModuleRegistry(DEFAULT_MODULES, DEFAULT_BUNDLES, DEFAULT_DEPENDENCIES)


def build_default_catalog() -> StaticPermissionCatalog:
    """In-memory permission catalog over the default definitions."""
    return StaticPermissionCatalog(DEFAULT_PERMISSION_DEFINITIONS)
