# imposter/instancing/__init__.py
from imposter.instancing.template import Instance, Template

__all__ = [
    "Instance",
    "Template",
]
