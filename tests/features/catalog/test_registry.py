"""Tests for the module registry and permission catalog."""

import pytest

from neo_tenancy.core.exceptions import (
    DependencyCycleError,
    UnknownBundleError,
    UnknownModuleError,
    ValidationError,
)
from neo_tenancy.features.catalog import (
    DEFAULT_PERMISSION_DEFINITIONS,
    ModuleBundle,
    ModuleDescriptor,
    ModulePermissionDefinition,
    ModuleRegistry,
    PermissionDefinition,
    StaticPermissionCatalog,
)


def _modules(*codes):
    return [ModuleDescriptor(code, code.title()) for code in codes]


class TestModuleRegistry:
    """Test registry lookups and dependency table validation."""
    
    def test_default_dependencies(self, registry):
        """Test the declared dependency table."""
        assert registry.dependencies_of("hr") == ["accounting"]
        assert registry.dependencies_of("procurement") == ["accounting", "inventory"]
        assert registry.dependencies_of("crm") == []
    
    def test_dependency_closure_is_transitive_and_ordered(self):
        """Test that foundations come before the modules that need them."""
        registry = ModuleRegistry(
            _modules("a", "b", "c", "d"),
            dependencies={"d": ["c", "b"], "c": ["a"], "b": ["a"]},
        )
        
        closure = registry.dependency_closure("d")
        
        assert closure == ["a", "c", "b"]
        assert "d" not in closure
    
    def test_procurement_closure(self, registry):
        """Test the closure of a module with a dependent dependency."""
        assert registry.dependency_closure("procurement") == ["accounting", "inventory"]
    
    def test_cycle_rejected(self):
        """Test that a cyclic dependency table is rejected."""
        with pytest.raises(DependencyCycleError) as exc_info:
            ModuleRegistry(_modules("a", "b", "c"), dependencies={"a": ["b"], "b": ["c"], "c": ["a"]})
        
        assert exc_info.value.details["cycle"][0] == exc_info.value.details["cycle"][-1]
    
    def test_self_dependency_rejected(self):
        with pytest.raises(DependencyCycleError):
            ModuleRegistry(_modules("a"), dependencies={"a": ["a"]})
    
    def test_unknown_dependency_rejected(self):
        with pytest.raises(ValidationError):
            ModuleRegistry(_modules("a"), dependencies={"a": ["ghost"]})
    
    def test_bundle_with_unknown_module_rejected(self):
        with pytest.raises(ValidationError):
            ModuleRegistry(_modules("a"), bundles=[ModuleBundle("b1", "Bundle", ("a", "ghost"))])
    
    def test_require_module(self, registry):
        assert registry.require_module("accounting").name == "Accounting"
        with pytest.raises(UnknownModuleError):
            registry.require_module("astrology")
    
    def test_require_bundle(self, registry):
        """Test bundle lookup."""
        starter = registry.require_bundle("starter")
        
        assert starter.modules_included == ("accounting", "inventory")
        assert registry.get_bundle("missing") is None
        with pytest.raises(UnknownBundleError):
            registry.require_bundle("missing")
    
    def test_empty_bundle_is_allowed(self, registry):
        assert registry.require_bundle("empty-company").modules_included == ()
    
    def test_listings(self, registry):
        codes = {module.code for module in registry.list_modules()}
        
        assert {"accounting", "inventory", "companyAdmin", "procurement"} <= codes
        assert len(registry.list_bundles()) == 11
        for bundle in registry.list_bundles():
            assert set(bundle.modules_included) <= codes


class TestPermissionDefinitions:
    """Test permission definitions and the static catalog."""
    
    def test_enabled_flag_only_disabled_when_explicitly_false(self):
        definition = ModulePermissionDefinition(
            module_id="demo",
            permissions=(
                PermissionDefinition("demo.a", "A"),
                PermissionDefinition("demo.b", "B", enabled=False),
                PermissionDefinition("demo.c", "C", enabled=None),
            ),
        )
        
        assert definition.enabled_permission_ids() == ["demo.a", "demo.c"]
    
    def test_permission_id_must_be_dotted_identifier(self):
        with pytest.raises(ValidationError):
            PermissionDefinition("", "Empty")
    
    @pytest.mark.asyncio
    async def test_static_catalog_lists_by_module(self):
        catalog = StaticPermissionCatalog(DEFAULT_PERMISSION_DEFINITIONS)
        
        definitions = await catalog.list_all()
        
        assert "accounting" in definitions
        assert "accounting.vouchers.approve" in definitions["accounting"].enabled_permission_ids()
    
    def test_every_default_permission_belongs_to_its_module(self):
        """Test that permission ids are prefixed by their owning module."""
        for definition in DEFAULT_PERMISSION_DEFINITIONS:
            for permission in definition.permissions:
                assert permission.id.startswith(definition.module_id + ".")
