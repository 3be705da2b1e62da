import importlib

mod = "concordia"
class LazyLoader:
    """
    Lazy loader for the concordia API to keep startup time low.
    """
    def __init__(self, mappings):
        self._modules = {}
        self._mappings = mappings

    def _load_module(self, module_name):
        if module_name not in self._modules:
            self._modules[module_name] = importlib.import_module(module_name)
        return self._modules[module_name]

    def __getattr__(self, item):
        if item in self._mappings:
            module_name, attr_name = self._mappings[item]
            module = self._load_module(module_name)
            return getattr(module, attr_name)
        else:
            return self._load_module(f"{mod}.{item}")

# Public names and the modules that define them
_mappings = {
    "Concordia": (f"{mod}.compiled", "Concordia"),
    "compile_schema": (f"{mod}.schemavalidator", "compile_schema"),
    "SchemaCompiler": (f"{mod}.schemavalidator", "SchemaCompiler"),
    "validate_data": (f"{mod}.datavalidator", "validate_data"),
    "DataValidator": (f"{mod}.datavalidator", "DataValidator"),
    "conforms_to": (f"{mod}.conformance", "conforms_to"),
    "ReferenceResolver": (f"{mod}.references", "ReferenceResolver"),
    "Kind": (f"{mod}.schema", "Kind"),
    "ArrayKind": (f"{mod}.schema", "ArrayKind"),
    "Phase": (f"{mod}.hooks", "Phase"),
    "HookRegistry": (f"{mod}.hooks", "HookRegistry"),
    "default_registry": (f"{mod}.hooks", "default_registry"),
    "register_hook": (f"{mod}.hooks", "register_hook"),
    "unregister_hook": (f"{mod}.hooks", "unregister_hook"),
    "FetchResult": (f"{mod}.fetcher", "FetchResult"),
    "HttpSchemaFetcher": (f"{mod}.fetcher", "HttpSchemaFetcher"),
    "MappingSchemaFetcher": (f"{mod}.fetcher", "MappingSchemaFetcher"),
    "ConcordiaError": (f"{mod}.errors", "ConcordiaError"),
    "SchemaStructureError": (f"{mod}.errors", "SchemaStructureError"),
    "DataTypeError": (f"{mod}.errors", "DataTypeError"),
    "ReferenceResolutionError": (f"{mod}.errors", "ReferenceResolutionError"),
    "ConformanceError": (f"{mod}.errors", "ConformanceError"),
    "ExtensionHookError": (f"{mod}.errors", "ExtensionHookError"),
}

_lazy_loader = LazyLoader(_mappings)

def __getattr__(name):
    return getattr(_lazy_loader, name)
