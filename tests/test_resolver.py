"""
tests/test_resolver.py
Unit tests for featureforge.resolver.CascadeResolver.

Tests cover:
- Enable with automatic requirement enabling, and rejection
- Disable with dependent cascade
- Language / framework changes with support-driven cascade
- Idempotence of re-applying the current target
- Repair of arbitrary loaded states
- The consistency invariant after every accepted mutation
"""

from __future__ import annotations

import pytest

from featureforge.errors import TargetMismatchError
from featureforge.matrix import SupportMatrix
from featureforge.graph import DependencyGraph
from featureforge.models import (
    ChangeReason,
    FeatureChange,
    FeatureKey,
    FeatureToggle,
    Framework,
    FrameworkChange,
    Language,
    LanguageChange,
    ProjectFeatureState,
    ResolutionResult,
    Target,
)
from featureforge.resolver import CascadeResolver

K = FeatureKey


def assert_consistent(
    result: ResolutionResult,
    matrix: SupportMatrix,
    graph: DependencyGraph,
) -> None:
    supported = matrix.supported_features(result.target.language, result.target.framework)
    for feature in result.state.enabled_features():
        assert feature in supported, f"{feature.value} enabled but unsupported"
        for requirement in graph.dependencies_of(feature):
            assert result.state.is_enabled(requirement), (
                f"{feature.value} enabled without {requirement.value}"
            )


# ===========================================================================
# Enable
# ===========================================================================


class TestEnable:
    def test_enables_missing_requirement(self, resolver: CascadeResolver, java_spring, empty_state) -> None:
        result = resolver.enable(empty_state, java_spring, K.PASSWORD_RESET)
        assert result.accepted
        assert result.state.enabled_features() == (K.PASSWORD_RESET, K.MAIL_SERVICE)
        assert result.changes == (
            FeatureChange(
                feature=K.MAIL_SERVICE,
                from_value=False,
                to_value=True,
                reason=ChangeReason.REQUIRED_BY,
                cause="passwordReset",
            ),
        )

    def test_requirement_already_enabled(self, resolver: CascadeResolver, java_spring, state_of) -> None:
        result = resolver.enable(state_of(K.MAIL_SERVICE), java_spring, K.JTE_TEMPLATES)
        assert result.state.enabled_features() == (K.MAIL_SERVICE, K.JTE_TEMPLATES)
        assert result.changes == ()

    def test_feature_without_requirements(self, resolver: CascadeResolver, go_chi, empty_state) -> None:
        result = resolver.enable(empty_state, go_chi, K.BULK_OPERATIONS)
        assert result.state.enabled_features() == (K.BULK_OPERATIONS,)
        assert result.changes == ()

    def test_enable_already_enabled_is_noop(self, resolver: CascadeResolver, java_spring, state_of) -> None:
        state = state_of(K.CACHING)
        result = resolver.enable(state, java_spring, K.CACHING)
        assert result.state == state
        assert result.changes == ()

    def test_enabled_feature_with_missing_requirement(
        self, resolver: CascadeResolver, java_spring, state_of
    ) -> None:
        result = resolver.enable(state_of(K.PASSWORD_RESET), java_spring, K.PASSWORD_RESET)
        assert result.state.enabled_features() == (K.PASSWORD_RESET, K.MAIL_SERVICE)
        assert result.changes == (
            FeatureChange(
                feature=K.MAIL_SERVICE,
                from_value=False,
                to_value=True,
                reason=ChangeReason.REQUIRED_BY,
                cause="passwordReset",
            ),
        )

    def test_transitive_closure(self, catalog, java_spring, empty_state) -> None:
        chain = DependencyGraph({K.WEBHOOKS: [K.DOMAIN_EVENTS], K.DOMAIN_EVENTS: [K.CACHING]})
        r = CascadeResolver(SupportMatrix(catalog), chain)
        result = r.enable(empty_state, java_spring, K.WEBHOOKS)
        assert result.accepted
        assert result.state.enabled_features() == (K.CACHING, K.WEBHOOKS, K.DOMAIN_EVENTS)
        assert [c.feature for c in result.changes] == [K.DOMAIN_EVENTS, K.CACHING]
        assert all(c.reason == ChangeReason.REQUIRED_BY for c in result.changes)
        assert all(c.cause == "webhooks" for c in result.changes)

    def test_input_state_is_not_mutated(self, resolver: CascadeResolver, java_spring, empty_state) -> None:
        resolver.enable(empty_state, java_spring, K.PASSWORD_RESET)
        assert empty_state.enabled_features() == ()


class TestEnableRejection:
    def test_unsupported_requirement_rejects(self, resolver: CascadeResolver, rust_axum, empty_state) -> None:
        result = resolver.enable(empty_state, rust_axum, K.SSE_UPDATES)
        assert not result.accepted
        assert result.rejection is not None
        assert result.rejection.feature == K.SSE_UPDATES
        assert result.rejection.blocking == (K.DOMAIN_EVENTS,)
        assert "Domain Events" in result.rejection.message
        assert "Rust / Axum" in result.rejection.message

    def test_rejection_leaves_state_untouched(self, resolver: CascadeResolver, rust_axum, state_of) -> None:
        state = state_of(K.CACHING)
        result = resolver.enable(state, rust_axum, K.SSE_UPDATES)
        assert result.state is state
        assert result.target == rust_axum
        assert result.changes == ()

    def test_unsupported_feature_itself(self, resolver: CascadeResolver, rust_axum, empty_state) -> None:
        result = resolver.enable(empty_state, rust_axum, K.HATEOAS)
        assert result.rejection is not None
        assert result.rejection.blocking == (K.HATEOAS,)
        assert result.rejection.message == "HATEOAS Links is not supported by Rust / Axum."

    def test_deep_unsupported_member_rejects(self, catalog, rust_axum, state_of) -> None:
        chain = DependencyGraph({K.PASSWORD_RESET: [K.MAIL_SERVICE], K.MAIL_SERVICE: [K.I18N]})
        r = CascadeResolver(SupportMatrix(catalog), chain)
        state = state_of(K.CACHING)
        result = r.enable(state, rust_axum, K.PASSWORD_RESET)
        assert not result.accepted
        assert result.rejection is not None
        assert result.rejection.blocking == (K.I18N,)
        assert result.state is state
        assert result.changes == ()

    def test_can_enable_matches_enable(self, resolver: CascadeResolver, go_gin, empty_state) -> None:
        assert resolver.can_enable(go_gin, K.PASSWORD_RESET) is None
        rejection = resolver.can_enable(go_gin, K.SSE_UPDATES)
        assert rejection is not None
        assert resolver.enable(empty_state, go_gin, K.SSE_UPDATES).rejection == rejection


# ===========================================================================
# Disable
# ===========================================================================


class TestDisable:
    def test_cascades_to_dependents(self, resolver: CascadeResolver, java_spring, state_of) -> None:
        state = state_of(K.PASSWORD_RESET, K.MAIL_SERVICE, K.JTE_TEMPLATES, K.CACHING)
        result = resolver.disable(state, java_spring, K.MAIL_SERVICE)
        assert result.state.enabled_features() == (K.CACHING,)
        assert [c.feature for c in result.changes] == [K.PASSWORD_RESET, K.JTE_TEMPLATES]
        assert all(c.reason == ChangeReason.REQUIRES for c in result.changes)
        assert all(c.cause == "mailService" for c in result.changes)

    def test_disabled_dependents_not_reported(self, resolver: CascadeResolver, java_spring, state_of) -> None:
        result = resolver.disable(state_of(K.PASSWORD_RESET, K.MAIL_SERVICE), java_spring, K.MAIL_SERVICE)
        assert result.disabled_features == [K.PASSWORD_RESET]

    def test_leaf_disable_has_no_side_effects(self, resolver: CascadeResolver, java_spring, state_of) -> None:
        result = resolver.disable(state_of(K.PASSWORD_RESET, K.MAIL_SERVICE), java_spring, K.PASSWORD_RESET)
        assert result.state.enabled_features() == (K.MAIL_SERVICE,)
        assert result.changes == ()

    def test_disable_already_disabled(self, resolver: CascadeResolver, java_spring, empty_state) -> None:
        result = resolver.disable(empty_state, java_spring, K.MAIL_SERVICE)
        assert result.state == empty_state
        assert result.changes == ()

    def test_transitive_cascade(self, catalog, empty_state, java_spring) -> None:
        chain = DependencyGraph({K.WEBHOOKS: [K.DOMAIN_EVENTS], K.DOMAIN_EVENTS: [K.CACHING]})
        r = CascadeResolver(SupportMatrix(catalog), chain)
        state = ProjectFeatureState.from_enabled([K.WEBHOOKS, K.DOMAIN_EVENTS, K.CACHING])
        result = r.disable(state, java_spring, K.CACHING)
        assert result.state.enabled_features() == ()
        assert [c.feature for c in result.changes] == [K.DOMAIN_EVENTS, K.WEBHOOKS]
        assert all(c.cause == "caching" for c in result.changes)


# ===========================================================================
# Target changes
# ===========================================================================


class TestTargetChange:
    def test_rust_axum_disables_each_feature_once(self, resolver: CascadeResolver, rust_axum, state_of) -> None:
        state = state_of(K.I18N, K.DOMAIN_EVENTS, K.EVENT_SOURCING)
        result = resolver.resolve(state, rust_axum, FrameworkChange(framework=Framework.AXUM))
        assert result.state.enabled_features() == ()
        assert [c.feature for c in result.changes] == [K.I18N, K.DOMAIN_EVENTS, K.EVENT_SOURCING]
        assert all(c.reason == ChangeReason.UNSUPPORTED for c in result.changes)
        assert all(c.cause == "rust/axum" for c in result.changes)

    def test_language_change_cascades(self, resolver: CascadeResolver, java_spring, state_of) -> None:
        state = state_of(K.HATEOAS, K.DOMAIN_EVENTS, K.SSE_UPDATES, K.PASSWORD_RESET, K.MAIL_SERVICE)
        mutation = LanguageChange(language=Language.GO, framework=Framework.GIN)
        result = resolver.resolve(state, java_spring, mutation)

        assert result.target == Target(language=Language.GO, framework=Framework.GIN)
        assert result.state.enabled_features() == (K.PASSWORD_RESET, K.MAIL_SERVICE)
        by_feature = {c.feature: c for c in result.changes}
        assert by_feature[K.HATEOAS].reason == ChangeReason.UNSUPPORTED
        assert by_feature[K.DOMAIN_EVENTS].reason == ChangeReason.UNSUPPORTED
        assert by_feature[K.SSE_UPDATES].reason == ChangeReason.REQUIRES
        assert by_feature[K.SSE_UPDATES].cause == "domainEvents"

    def test_framework_switch_within_language(self, resolver: CascadeResolver, go_chi, state_of) -> None:
        result = resolver.resolve(state_of(K.BULK_OPERATIONS), go_chi, FrameworkChange(framework=Framework.GIN))
        assert result.target.framework == Framework.GIN
        assert result.disabled_features == [K.BULK_OPERATIONS]

    def test_same_target_on_consistent_state(self, resolver: CascadeResolver, go_chi, state_of) -> None:
        state = state_of(K.BULK_OPERATIONS, K.PASSWORD_RESET, K.MAIL_SERVICE)
        result = resolver.resolve(state, go_chi, FrameworkChange(framework=Framework.CHI))
        assert result.changes == ()
        assert result.state == state

    def test_reapplying_target_is_idempotent(self, resolver: CascadeResolver, java_spring, state_of) -> None:
        mutation = LanguageChange(language=Language.RUST, framework=Framework.AXUM)
        once = resolver.resolve(state_of(*FeatureKey), java_spring, mutation)
        twice = resolver.resolve(once.state, once.target, mutation)
        assert twice.state == once.state
        assert twice.changes == ()

    def test_every_target_yields_consistent_state(
        self,
        resolver: CascadeResolver,
        matrix: SupportMatrix,
        graph: DependencyGraph,
        java_spring,
        state_of,
    ) -> None:
        everything = state_of(*FeatureKey)
        for language in Language:
            for framework in matrix.frameworks_for_language(language):
                mutation = LanguageChange(language=language, framework=framework)
                assert_consistent(resolver.resolve(everything, java_spring, mutation), matrix, graph)

    def test_mismatched_new_target_raises(self, resolver: CascadeResolver, java_spring, empty_state) -> None:
        with pytest.raises(TargetMismatchError):
            resolver.resolve(empty_state, java_spring, LanguageChange(language=Language.GO, framework=Framework.AXUM))

    def test_framework_of_other_language_raises(self, resolver: CascadeResolver, java_spring, empty_state) -> None:
        with pytest.raises(TargetMismatchError):
            resolver.resolve(empty_state, java_spring, FrameworkChange(framework=Framework.CHI))


# ===========================================================================
# Dispatch
# ===========================================================================


class TestResolveDispatch:
    def test_toggle_enable(self, resolver: CascadeResolver, java_spring, empty_state) -> None:
        result = resolver.resolve(empty_state, java_spring, FeatureToggle(feature=K.PASSWORD_RESET, enabled=True))
        assert result.state.is_enabled(K.MAIL_SERVICE)

    def test_toggle_disable(self, resolver: CascadeResolver, java_spring, state_of) -> None:
        state = state_of(K.PASSWORD_RESET, K.MAIL_SERVICE)
        result = resolver.resolve(state, java_spring, FeatureToggle(feature=K.MAIL_SERVICE, enabled=False))
        assert result.state.enabled_features() == ()

    def test_invalid_current_target_raises(self, resolver: CascadeResolver, empty_state) -> None:
        bad = Target(language=Language.JAVA, framework=Framework.GIN)
        with pytest.raises(TargetMismatchError):
            resolver.resolve(empty_state, bad, FeatureToggle(feature=K.CACHING, enabled=True))

    def test_unknown_mutation_raises(self, resolver: CascadeResolver, java_spring, empty_state) -> None:
        with pytest.raises(TypeError):
            resolver.resolve(empty_state, java_spring, object())  # type: ignore[arg-type]

    def test_accepted_results_are_consistent(
        self,
        resolver: CascadeResolver,
        matrix: SupportMatrix,
        graph: DependencyGraph,
        go_gin,
        empty_state,
    ) -> None:
        state = empty_state
        for feature in FeatureKey:
            result = resolver.enable(state, go_gin, feature)
            if result.accepted:
                assert_consistent(result, matrix, graph)
                state = result.state
        for feature in FeatureKey:
            result = resolver.disable(state, go_gin, feature)
            assert_consistent(result, matrix, graph)
            state = result.state
        assert state.enabled_features() == ()


# ===========================================================================
# Repair
# ===========================================================================


class TestRepair:
    def test_missing_requirement_disables_feature(self, resolver: CascadeResolver, java_spring, state_of) -> None:
        result = resolver.repair(state_of(K.PASSWORD_RESET, K.CACHING), java_spring)
        assert result.state.enabled_features() == (K.CACHING,)
        assert result.changes[0].reason == ChangeReason.REQUIRES
        assert result.changes[0].cause == "mailService"

    def test_never_enables(self, resolver: CascadeResolver, java_spring, state_of) -> None:
        result = resolver.repair(state_of(K.SSE_UPDATES), java_spring)
        assert not result.state.is_enabled(K.DOMAIN_EVENTS)
        assert result.enabled_features == []

    def test_unsupported_then_cascade(self, resolver: CascadeResolver, go_chi, state_of) -> None:
        state = state_of(K.DOMAIN_EVENTS, K.EVENT_SOURCING, K.SSE_UPDATES)
        result = resolver.repair(state, go_chi)
        assert result.state.enabled_features() == ()
        assert [(c.feature, c.reason) for c in result.changes] == [
            (K.DOMAIN_EVENTS, ChangeReason.UNSUPPORTED),
            (K.EVENT_SOURCING, ChangeReason.UNSUPPORTED),
            (K.SSE_UPDATES, ChangeReason.REQUIRES),
        ]

    def test_consistent_state_unchanged(self, resolver: CascadeResolver, java_spring, state_of) -> None:
        state = state_of(K.PASSWORD_RESET, K.MAIL_SERVICE)
        result = resolver.repair(state, java_spring)
        assert result.state == state
        assert result.changes == ()
