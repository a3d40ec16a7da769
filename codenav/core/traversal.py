"""Bounded graph walks shared by every language backend.

Backends supply small primitives (how to list supertype references, resolve
a call, find the enclosing callable ...); the walks here own the cycle
breaking, depth caps and per-level fan-out limits.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from itertools import islice
from typing import TYPE_CHECKING, TypeVar

from codenav.core.config import DEFAULT_LIMITS, Limits
from codenav.core.models import CallNode, ElementReference, TypeNode

if TYPE_CHECKING:
    from codenav.model.base import Symbol

logger = logging.getLogger(__name__)

R = TypeVar("R")


class EdgeOrigin(Enum):
    """Language mechanism a supertype edge was discovered through."""

    EXTENDS = "extends"
    IMPLEMENTS = "implements"
    EMBEDS = "embeds"


@dataclass(frozen=True)
class SupertypeEdge:
    """One edge of a type graph.

    ``target`` is None for references that could not be resolved; such edges
    are reported as leaves.
    """

    element: ElementReference
    origin: EdgeOrigin
    target: Symbol | None = None


@dataclass(frozen=True)
class CallTarget:
    """A call expression and the callable it resolves to (if any)."""

    callable: Symbol | None
    text: str


@dataclass(frozen=True)
class SuperMethodEdge:
    """A method in an ancestor type that ``method`` overrides or implements."""

    method: Symbol
    owner_name: str
    owner_kind: str
    is_interface: bool
    owner: Symbol | None = None


def ascend_supertypes(
    root: Symbol,
    root_identity: str,
    references_of: Callable[[Symbol], Iterable[R]],
    resolve_edge: Callable[[Symbol, R], SupertypeEdge | None],
    max_depth: int = DEFAULT_LIMITS.max_hierarchy_depth,
) -> tuple[TypeNode, ...]:
    """Depth-first ascent from ``root``.

    A single ``visited`` set (seeded with the root) spans the whole ascent, so
    every type identity appears at most once and cycles terminate. Nodes are
    produced for levels 1..``max_depth``. An edge whose resolution raises is
    dropped.
    """
    visited = {root_identity}

    def expand(type_symbol: Symbol, depth: int) -> tuple[TypeNode, ...]:
        if depth > max_depth:
            return ()
        try:
            references = list(references_of(type_symbol))
        except Exception as e:
            logger.debug("Cannot list supertypes of %s: %s", type_symbol.name, e)
            return ()

        nodes: list[TypeNode] = []
        for ref in references:
            try:
                edge = resolve_edge(type_symbol, ref)
            except Exception as e:
                logger.debug("Dropping supertype edge %r of %s: %s", ref, type_symbol.name, e)
                continue
            if edge is None:
                continue
            identity = edge.element.identity
            if identity in visited:
                continue
            visited.add(identity)
            parents = expand(edge.target, depth + 1) if edge.target is not None else ()
            nodes.append(TypeNode(edge.element, parents))
        return tuple(nodes)

    return expand(root, 1)


def collect_bounded(
    candidates: Iterable[Symbol],
    to_reference: Callable[[Symbol], ElementReference],
    exclude: Symbol,
    limit: int,
) -> tuple[ElementReference, ...]:
    """First ``limit`` distinct references, skipping ``exclude``.

    Consumes ``candidates`` lazily so large scans stop at the cap.
    """
    result: list[ElementReference] = []
    seen: set[str] = set()
    try:
        for candidate in candidates:
            if len(result) >= limit:
                break
            if candidate == exclude:
                continue
            ref = to_reference(candidate)
            if ref.identity in seen:
                continue
            seen.add(ref.identity)
            result.append(ref)
    except Exception as e:
        logger.debug("Inheritor scan stopped early: %s", e)
    return tuple(result)


def walk_callees(
    root: Symbol,
    depth: int,
    calls_of: Callable[[Symbol], Iterable[CallTarget]],
    key_of: Callable[[Symbol], str],
    to_reference: Callable[[Symbol], ElementReference],
    unresolved: Callable[[str], ElementReference | None] | None = None,
    limits: Limits = DEFAULT_LIMITS,
) -> tuple[CallNode, ...]:
    """Callees of ``root`` nested up to ``depth`` levels.

    Children of one node are unique by ``(name, file)``; unresolved calls are
    unique by name. No callable is expanded twice in one walk.
    """
    visited: set[str] = set()

    def recurse(fn: Symbol, depth: int, stack_depth: int) -> tuple[CallNode, ...]:
        if stack_depth > limits.max_stack_depth or depth <= 0:
            return ()
        key = key_of(fn)
        if key in visited:
            return ()
        visited.add(key)

        callees: list[CallNode] = []
        seen: set[tuple[str, str | None]] = set()
        unresolved_seen: set[str] = set()
        try:
            for call in islice(calls_of(fn), limits.max_results_per_level):
                if call.callable is not None:
                    children = recurse(call.callable, depth - 1, stack_depth + 1) if depth > 1 else ()
                    ref = to_reference(call.callable)
                    pair = (ref.name, ref.file)
                    if pair not in seen:
                        seen.add(pair)
                        callees.append(CallNode(ref, children))
                elif unresolved is not None:
                    ref = unresolved(call.text)
                    if ref is not None and ref.name not in unresolved_seen:
                        unresolved_seen.add(ref.name)
                        callees.append(CallNode(ref))
        except Exception as e:
            logger.debug("Stopped collecting callees of %s: %s", fn.name, e)
        return tuple(callees)

    return recurse(root, depth, 0)


def walk_callers(
    root: Symbol,
    depth: int,
    search_set_of: Callable[[Symbol], Sequence[Symbol]],
    references_of: Callable[[Symbol], Iterable[Symbol]],
    enclosing_of: Callable[[Symbol], Symbol | None],
    key_of: Callable[[Symbol], str],
    to_reference: Callable[[Symbol], ElementReference],
    limits: Limits = DEFAULT_LIMITS,
) -> tuple[CallNode, ...]:
    """Callers of ``root`` nested up to ``depth`` levels.

    ``search_set_of`` returns the ancestor methods a callable overrides;
    references to any of them count as calls of the callable itself, because
    a call through the ancestor may dispatch to the override. Callables in the
    search set are never reported as their own callers. Children are unique by
    ``(name, file, line)``.
    """
    visited: set[str] = set()

    def recurse(fn: Symbol, depth: int, stack_depth: int) -> tuple[CallNode, ...]:
        if stack_depth > limits.max_stack_depth or depth <= 0:
            return ()
        key = key_of(fn)
        if key in visited:
            return ()
        visited.add(key)

        search_set = [fn]
        try:
            ancestors = list(search_set_of(fn))
        except Exception as e:
            logger.debug("Cannot list overridden methods of %s: %s", fn.name, e)
            ancestors = []
        for ancestor in ancestors[: limits.max_super_methods]:
            if ancestor not in search_set:
                search_set.append(ancestor)

        sites: list[Symbol] = []
        for target in search_set:
            try:
                sites.extend(references_of(target))
            except Exception as e:
                logger.debug("Dropping references to %s: %s", target.name, e)

        callers: list[CallNode] = []
        seen: set[tuple[str, str | None, int | None]] = set()
        for site in sites[: limits.max_results_per_level]:
            try:
                caller = enclosing_of(site)
                if caller is None or caller in search_set:
                    continue
                children = recurse(caller, depth - 1, stack_depth + 1) if depth > 1 else ()
                ref = to_reference(caller)
            except Exception as e:
                logger.debug("Dropping call site of %s at line %s: %s", fn.name, site.line, e)
                continue
            triple = (ref.name, ref.file, ref.line)
            if triple in seen:
                continue
            seen.add(triple)
            callers.append(CallNode(ref, children))
        return tuple(callers)

    return recurse(root, depth, 0)


def walk_super_methods(
    method: Symbol,
    direct_supers_of: Callable[[Symbol], Iterable[SuperMethodEdge]],
    max_depth: int = DEFAULT_LIMITS.max_hierarchy_depth,
) -> list[tuple[SuperMethodEdge, int]]:
    """Override chain of ``method`` as ``(edge, depth)`` pairs.

    Walks one level at a time: every edge reachable at depth ``n`` is claimed
    before anything at depth ``n + 1``, so an ancestor reachable both directly
    and through another ancestor is reported at the shallower depth. Each
    ``owner.method`` key is reported once, in ascending depth order.
    """
    visited: set[str] = set()
    found: list[tuple[SuperMethodEdge, int]] = []
    level = [method]
    depth = 1
    while level and depth <= max_depth:
        next_level: list[Symbol] = []
        for current in level:
            try:
                edges = list(direct_supers_of(current))
            except Exception as e:
                logger.debug("Cannot list super methods of %s: %s", current.name, e)
                continue
            for edge in edges:
                key = f"{edge.owner_name}.{edge.method.name}"
                if key in visited:
                    continue
                visited.add(key)
                found.append((edge, depth))
                next_level.append(edge.method)
        level = next_level
        depth += 1
    return found
