"""Read-only module registry with the static dependency table."""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from ....core.exceptions import (
    DependencyCycleError,
    UnknownBundleError,
    UnknownModuleError,
    ValidationError,
)
from .definitions import ModuleBundle, ModuleDescriptor


logger = logging.getLogger(__name__)


class ModuleRegistry:
    """Catalog of installable modules, bundles and module dependencies.
    
    The dependency table maps a module code to the codes it requires.
    It is validated on construction: every referenced code must be a
    known module and the relation must be acyclic.
    """
    
    def __init__(
        self,
        modules: Iterable[ModuleDescriptor],
        bundles: Iterable[ModuleBundle] = (),
        dependencies: Optional[Mapping[str, Sequence[str]]] = None,
    ):
        self._modules: Dict[str, ModuleDescriptor] = {m.code: m for m in modules}
        self._bundles: Dict[str, ModuleBundle] = {b.id: b for b in bundles}
        self._dependencies: Dict[str, tuple] = {
            code: tuple(deps) for code, deps in (dependencies or {}).items()
        }
        self._validate()
    
    def _validate(self) -> None:
        for code, deps in self._dependencies.items():
            for dep in (code, *deps):
                if dep not in self._modules:
                    raise ValidationError(
                        f"Dependency table references unknown module '{dep}'",
                        details={"module": code},
                    )
        for bundle in self._bundles.values():
            unknown = [code for code in bundle.modules_included if code not in self._modules]
            if unknown:
                raise ValidationError(
                    f"Bundle '{bundle.id}' includes unknown modules: {', '.join(unknown)}",
                    details={"bundle": bundle.id, "modules": unknown},
                )
        
        # Depth-first search, grey/black colouring
        visiting: set = set()
        done: set = set()
        
        def visit(code: str, path: List[str]) -> None:
            if code in done:
                return
            if code in visiting:
                cycle = path[path.index(code):] + [code]
                raise DependencyCycleError(
                    f"Module dependency cycle: {' -> '.join(cycle)}",
                    details={"cycle": cycle},
                )
            visiting.add(code)
            for dep in self._dependencies.get(code, ()):
                visit(dep, path + [code])
            visiting.discard(code)
            done.add(code)
        
        for code in self._dependencies:
            visit(code, [])
    
    # Modules
    
    def get_module(self, code: str) -> Optional[ModuleDescriptor]:
        return self._modules.get(code)
    
    def require_module(self, code: str) -> ModuleDescriptor:
        """Return the module or raise UnknownModuleError."""
        module = self.get_module(code)
        if module is None:
            raise UnknownModuleError(f"Unknown module: {code}", details={"module": code})
        return module
    
    def list_modules(self) -> List[ModuleDescriptor]:
        return list(self._modules.values())
    
    # Bundles
    
    def get_bundle(self, bundle_id: str) -> Optional[ModuleBundle]:
        return self._bundles.get(bundle_id)
    
    def require_bundle(self, bundle_id: str) -> ModuleBundle:
        """Return the bundle or raise UnknownBundleError."""
        bundle = self._bundles.get(bundle_id)
        if bundle is None:
            raise UnknownBundleError(f"Unknown bundle: {bundle_id}", details={"bundle": bundle_id})
        return bundle
    
    def list_bundles(self) -> List[ModuleBundle]:
        return list(self._bundles.values())
    
    # Dependencies
    
    def dependencies_of(self, code: str) -> List[str]:
        """Declared direct dependencies, empty when none."""
        return list(self._dependencies.get(code, ()))
    
    def dependency_closure(self, code: str) -> List[str]:
        """All transitive dependencies of ``code``, foundations first.
        
        The module itself is not included. Each dependency appears once,
        after everything it depends on.
        """
        ordered: List[str] = []
        
        def walk(current: str) -> None:
            for dep in self._dependencies.get(current, ()):
                if dep not in ordered:
                    walk(dep)
                    ordered.append(dep)
        
        walk(code)
        return ordered
