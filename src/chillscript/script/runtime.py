"""
Evaluation context for chill-script.

A runtime holds the variable bindings and imported namespaces one script
execution resolves identifiers against. It is passed by reference into
every ``evaluate`` call and is not safe for concurrent mutation: share a
parsed tree between threads, not a runtime.

Usage:
    runtime = ChillScriptRuntime({"price": 10}).with_import("decimal.Decimal")
    runtime.bind("qty", 3)
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Iterator, Mapping
from types import MappingProxyType, ModuleType
from typing import Any

from chillscript.core.config import ScriptSettings
from chillscript.core.errors import ChillScriptError, UnresolvedIdentifierError

from .values import to_value

logger = logging.getLogger(__name__)


class NamespaceImportError(ChillScriptError):
    """Raised when ``with_import`` cannot resolve a module or name."""


class ChillScriptRuntime:
    """Variable bindings plus imported namespaces, in lookup order."""

    def __init__(
        self,
        bindings: Mapping[str, Any] | None = None,
        settings: ScriptSettings | None = None,
    ):
        self.settings = settings if settings is not None else ScriptSettings()
        self._bindings: dict[str, Any] = {}
        self._namespaces: list[tuple[str, Mapping[str, Any]]] = []
        for name, value in (bindings or {}).items():
            self.bind(name, value)

    # -- Bindings --

    def bind(self, name: str, value: Any) -> None:
        self._bindings[name] = to_value(value)

    def unbind(self, name: str) -> None:
        self._bindings.pop(name, None)

    def lookup(self, name: str) -> Any:
        """Resolve ``name`` against bindings, then imports in import order.

        Raises:
            UnresolvedIdentifierError: If nothing provides ``name``.
        """
        if name in self._bindings:
            return self._bindings[name]
        for _label, namespace in self._namespaces:
            if name in namespace:
                return to_value(namespace[name])
        raise UnresolvedIdentifierError(name)

    def __contains__(self, name: object) -> bool:
        if name in self._bindings:
            return True
        return any(name in namespace for _label, namespace in self._namespaces)

    @property
    def bindings(self) -> Mapping[str, Any]:
        return MappingProxyType(self._bindings)

    # -- Imports --

    def with_import(self, spec: str) -> ChillScriptRuntime:
        """Import a namespace and return ``self`` for chaining.

        ``"package.module.*"`` exposes the module's public names;
        ``"package.module.Name"`` exposes a single attribute.
        """
        if spec.endswith(".*"):
            module = self._import_module(spec[:-2], spec)
            return self.import_namespace(spec, _public_names(module))

        module_name, _, attr = spec.rpartition(".")
        if not module_name:
            module = self._import_module(spec, spec)
            return self.import_namespace(spec, {spec: module})

        module = self._import_module(module_name, spec)
        if not hasattr(module, attr):
            raise NamespaceImportError(f"Module '{module_name}' has no attribute '{attr}'")
        return self.import_namespace(spec, {attr: getattr(module, attr)})

    def import_namespace(
        self, label: str, namespace: Mapping[str, Any] | None = None
    ) -> ChillScriptRuntime:
        """Add an in-memory namespace after the existing imports."""
        self._namespaces.append((label, namespace if namespace is not None else {}))
        logger.debug("Imported namespace %s", label)
        return self

    @property
    def imports(self) -> list[str]:
        return [label for label, _namespace in self._namespaces]

    def iter_names(self) -> Iterator[str]:
        """Every resolvable name, bindings first."""
        seen: set[str] = set()
        for name in self._bindings:
            seen.add(name)
            yield name
        for _label, namespace in self._namespaces:
            for name in namespace:
                if name not in seen:
                    seen.add(name)
                    yield name

    @staticmethod
    def _import_module(module_name: str, spec: str) -> ModuleType:
        try:
            return importlib.import_module(module_name)
        except ImportError as e:
            raise NamespaceImportError(f"Cannot import '{spec}': {e}") from e


def _public_names(module: ModuleType) -> dict[str, Any]:
    names = getattr(module, "__all__", None)
    if names is None:
        names = [name for name in vars(module) if not name.startswith("_")]
    return {name: getattr(module, name) for name in names if hasattr(module, name)}
