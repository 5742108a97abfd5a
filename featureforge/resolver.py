# File: featureforge/resolver.py
"""
featureforge - Cascade Resolver
=================================
Applies one mutation to a ``ProjectFeatureState`` and returns a new state
that satisfies the engine invariant, plus the side-effect change log:

    for every enabled f:  f is supported by the target
                          and every requirement of f is enabled

Mutation handling:

* **target change** (language or framework): every enabled feature the new
  target does not support is switched off, then everything that required
  one of those features is switched off too.  Recomputed on every call, so a
  change to the target already in effect is a no-op on a consistent state.
* **enable f**: the transitive requirements of f are switched on.  If f or
  any member of its closure is unsupported the request is rejected and the
  input state is returned untouched.
* **disable f**: every enabled feature that (transitively) requires f is
  switched off.  Always succeeds.

All walks are breadth-first with a visited set, so each feature is examined
at most once per walk even if the static graph were cyclic.

The resolver holds no mutable state; every call is a pure function of its
arguments and the catalog it was built with.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Dict, List, Optional, Set

from featureforge.graph import DependencyGraph
from featureforge.matrix import SupportMatrix
from featureforge.models import (
    ChangeReason,
    FeatureChange,
    FeatureKey,
    FeatureToggle,
    FrameworkChange,
    LanguageChange,
    Mutation,
    ProjectFeatureState,
    Rejection,
    ResolutionResult,
    Target,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("featureforge.resolver")


class _Working:
    """Pending updates layered over an unchanged input state."""

    __slots__ = ("base", "updates", "changes")

    def __init__(self, base: ProjectFeatureState) -> None:
        self.base: ProjectFeatureState = base
        self.updates: Dict[FeatureKey, bool] = {}
        self.changes: List[FeatureChange] = []

    def is_enabled(self, feature: FeatureKey) -> bool:
        return self.updates.get(feature, self.base.is_enabled(feature))

    def set(
        self,
        feature: FeatureKey,
        value: bool,
        reason: Optional[ChangeReason] = None,
        cause: Optional[str] = None,
    ) -> None:
        before: bool = self.is_enabled(feature)
        if before == value:
            return
        self.updates[feature] = value
        if reason is not None:
            self.changes.append(
                FeatureChange(
                    feature=feature,
                    from_value=before,
                    to_value=value,
                    reason=reason,
                    cause=cause,
                )
            )

    def result(self, target: Target) -> ResolutionResult:
        return ResolutionResult(
            state=self.base.with_values(self.updates),
            target=target,
            changes=tuple(self.changes),
        )


class CascadeResolver:
    """
    Restores feature consistency after a single mutation.

    Args:
        matrix: Support decisions for the active catalog.
        graph: Dependency edges of the same catalog.
    """

    __slots__ = ("_matrix", "_graph", "_order")

    def __init__(self, matrix: SupportMatrix, graph: DependencyGraph) -> None:
        self._matrix: SupportMatrix = matrix
        self._graph: DependencyGraph = graph
        self._order: Dict[FeatureKey, int] = {
            key: i for i, key in enumerate(matrix.catalog.features)
        }

    # -- Entry point --------------------------------------------------------

    def resolve(
        self,
        state: ProjectFeatureState,
        target: Target,
        mutation: Mutation,
    ) -> ResolutionResult:
        """
        Apply ``mutation`` to ``state`` under ``target``.

        Raises:
            TargetMismatchError: ``target`` or the mutation pairs a framework
                with a language it does not belong to.
            TypeError: ``mutation`` is not a known mutation kind.
        """
        self._matrix.check_target(target.language, target.framework)

        if isinstance(mutation, LanguageChange):
            new_target: Target = self._matrix.check_target(mutation.language, mutation.framework)
            return self.change_target(state, new_target)

        if isinstance(mutation, FrameworkChange):
            new_target = self._matrix.check_target(target.language, mutation.framework)
            return self.change_target(state, new_target)

        if isinstance(mutation, FeatureToggle):
            if mutation.enabled:
                return self.enable(state, target, mutation.feature)
            return self.disable(state, target, mutation.feature)

        raise TypeError(f"Unknown mutation: {mutation!r}")

    # -- Target change ------------------------------------------------------

    def change_target(self, state: ProjectFeatureState, target: Target) -> ResolutionResult:
        """Switch off everything ``target`` does not support, then cascade."""
        self._matrix.check_target(target.language, target.framework)
        work: _Working = _Working(state)
        self._disable_unsupported(work, target)
        result: ResolutionResult = work.result(target)
        logger.info(
            "Target change to %s: %d feature(s) disabled.",
            target,
            len(result.changes),
        )
        return result

    def _disable_unsupported(self, work: _Working, target: Target) -> None:
        unsupported = self._matrix.unsupported_features(target.language, target.framework)
        forced: List[FeatureKey] = [
            f for f in self._sorted(unsupported) if work.is_enabled(f)
        ]
        for feature in forced:
            work.set(feature, False, ChangeReason.UNSUPPORTED, str(target))
        for feature in forced:
            self._cascade_disable(work, feature)

    # -- Enable -------------------------------------------------------------

    def can_enable(self, target: Target, feature: FeatureKey) -> Optional[Rejection]:
        """
        Pre-check for an enable toggle without applying it.

        Returns ``None`` when ``feature`` and its whole requirement closure
        are supported by ``target``, otherwise the ``Rejection`` that
        ``enable`` would return.
        """
        closure: List[FeatureKey] = [feature, *self._graph.transitive_dependencies(feature)]
        supported = self._matrix.supported_features(target.language, target.framework)
        blocking: List[FeatureKey] = [f for f in closure if f not in supported]
        if not blocking:
            return None

        catalog = self._matrix.catalog
        label: str = catalog.label(feature)
        if feature in blocking:
            message: str = f"{label} is not supported by {self._target_label(target)}."
        else:
            names: str = ", ".join(catalog.labels(blocking))
            message = (
                f"{label} cannot be enabled: it requires {names}, "
                f"not supported by {self._target_label(target)}."
            )
        return Rejection(feature=feature, blocking=tuple(blocking), message=message)

    def enable(
        self,
        state: ProjectFeatureState,
        target: Target,
        feature: FeatureKey,
    ) -> ResolutionResult:
        """Enable ``feature`` and everything it transitively requires, or reject."""
        rejection: Optional[Rejection] = self.can_enable(target, feature)
        if rejection is not None:
            logger.warning("Enable of %s rejected: %s", feature.value, rejection.message)
            return ResolutionResult(state=state, target=target, rejection=rejection)

        work: _Working = _Working(state)
        work.set(feature, True)

        visited: Set[FeatureKey] = {feature}
        queue: Deque[FeatureKey] = deque([feature])
        while queue:
            node: FeatureKey = queue.popleft()
            for requirement in self._sorted(self._graph.dependencies_of(node)):
                if requirement in visited:
                    continue
                visited.add(requirement)
                work.set(requirement, True, ChangeReason.REQUIRED_BY, feature.value)
                queue.append(requirement)

        result: ResolutionResult = work.result(target)
        logger.info(
            "Enabled %s: %d requirement(s) enabled.",
            feature.value,
            len(result.changes),
        )
        return result

    # -- Disable ------------------------------------------------------------

    def disable(
        self,
        state: ProjectFeatureState,
        target: Target,
        feature: FeatureKey,
    ) -> ResolutionResult:
        """Disable ``feature`` and every enabled feature that requires it."""
        work: _Working = _Working(state)
        work.set(feature, False)
        self._cascade_disable(work, feature)
        result: ResolutionResult = work.result(target)
        logger.info(
            "Disabled %s: %d dependent(s) disabled.",
            feature.value,
            len(result.changes),
        )
        return result

    def _cascade_disable(self, work: _Working, root: FeatureKey) -> None:
        visited: Set[FeatureKey] = {root}
        queue: Deque[FeatureKey] = deque([root])
        while queue:
            node: FeatureKey = queue.popleft()
            for dependent in self._sorted(self._graph.dependents_of(node)):
                if dependent in visited:
                    continue
                visited.add(dependent)
                if work.is_enabled(dependent):
                    logger.debug("%s requires %s; disabling.", dependent.value, node.value)
                    work.set(dependent, False, ChangeReason.REQUIRES, root.value)
                queue.append(dependent)

    # -- Repair -------------------------------------------------------------

    def repair(self, state: ProjectFeatureState, target: Target) -> ResolutionResult:
        """
        Bring an arbitrary state (e.g. a loaded document) to the invariant.

        Unsupported features are switched off first.  Any feature still
        enabled with a missing requirement is then switched off, together
        with its dependents.  Missing requirements are never switched on.
        """
        self._matrix.check_target(target.language, target.framework)
        work: _Working = _Working(state)
        self._disable_unsupported(work, target)

        for feature in self._graph.topological_order():
            if not work.is_enabled(feature):
                continue
            missing: List[FeatureKey] = [
                r for r in self._sorted(self._graph.dependencies_of(feature))
                if not work.is_enabled(r)
            ]
            if missing:
                work.set(feature, False, ChangeReason.REQUIRES, missing[0].value)
                self._cascade_disable(work, feature)

        result: ResolutionResult = work.result(target)
        if result.changes:
            logger.info("Repaired state for %s: %d change(s).", target, len(result.changes))
        return result

    # -- Helpers ------------------------------------------------------------

    def _sorted(self, features) -> List[FeatureKey]:
        return sorted(features, key=self._order.__getitem__)

    def _target_label(self, target: Target) -> str:
        catalog = self._matrix.catalog
        return (
            f"{catalog.language_label(target.language)} / "
            f"{catalog.framework_label(target.framework)}"
        )

    def __repr__(self) -> str:
        return f"<CascadeResolver {self._graph!r}>"


__all__: List[str] = ["CascadeResolver"]
