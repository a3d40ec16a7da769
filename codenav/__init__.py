"""
codenav: code navigation across Java, Kotlin, Python, JavaScript, TypeScript and Go.

codenav answers structural questions about a resolved code model:
- Type hierarchies (supertypes up, subtypes down)
- Call hierarchies (callers, including calls through overridden methods, or callees)
- Implementations and overridden super methods
- Fuzzy symbol search

Usage:
    from codenav.core.config import get_default_snapshot_path
    from codenav.navigator import Navigator

    nav = Navigator.from_snapshot(get_default_snapshot_path(Path(".")))
    element = nav.resolve("Shape.area")
    print(nav.call_hierarchy(element, "callers", depth=3).to_dict())
"""

__version__ = "0.1.0"
