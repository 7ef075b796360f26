from .data_registry import DataRegistry, load_registry_from_yaml

__all__ = ["DataRegistry", "load_registry_from_yaml"]
