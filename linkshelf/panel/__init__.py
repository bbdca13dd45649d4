from linkshelf.panel.client import ResourceClient
from linkshelf.panel.controller import LinkPanel
from linkshelf.panel.entities import Link, LinkGroup, LinkPage, resolve_priority

__all__ = [
    "Link",
    "LinkGroup",
    "LinkPage",
    "LinkPanel",
    "ResourceClient",
    "resolve_priority",
]
