from prometheus_client import CollectorRegistry

# Private registry so importing the toolkit never pollutes the global one.
REGISTRY = CollectorRegistry(auto_describe=True)
