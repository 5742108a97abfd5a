"""
tests/test_notifications.py
Unit tests for featureforge.notifications.build_notifications.
"""

from __future__ import annotations

import pytest

from featureforge.catalog import FeatureCatalog
from featureforge.models import ChangeReason, FeatureChange, FeatureKey, Language, Target
from featureforge.notifications import Notification, build_notifications

K = FeatureKey


def _unsupported(feature: FeatureKey, target: Target) -> FeatureChange:
    return FeatureChange(
        feature=feature,
        from_value=True,
        to_value=False,
        reason=ChangeReason.UNSUPPORTED,
        cause=str(target),
    )


class TestUnsupportedNotifications:
    def test_single(self, catalog: FeatureCatalog, rust_axum: Target) -> None:
        notes = build_notifications([_unsupported(K.I18N, rust_axum)], catalog, rust_axum)
        assert notes == [
            Notification(
                level="warning",
                title="Feature Disabled",
                message="Internationalization is not supported by Rust and has been disabled.",
            )
        ]

    def test_lists_up_to_threshold(self, catalog: FeatureCatalog, rust_axum: Target) -> None:
        changes = [_unsupported(f, rust_axum) for f in (K.I18N, K.DOMAIN_EVENTS, K.EVENT_SOURCING)]
        (note,) = build_notifications(changes, catalog, rust_axum)
        assert note.title == "Features Disabled"
        assert note.message == (
            "Internationalization, Domain Events, Event Sourcing are not supported "
            "by Rust and have been disabled."
        )

    def test_count_above_threshold(self, catalog: FeatureCatalog, rust_axum: Target) -> None:
        changes = [
            _unsupported(f, rust_axum)
            for f in (K.HATEOAS, K.I18N, K.DOMAIN_EVENTS, K.EVENT_SOURCING)
        ]
        (note,) = build_notifications(changes, catalog, rust_axum)
        assert note.message == "4 features are not supported by Rust and have been disabled."

    def test_threshold_is_configurable(self, catalog: FeatureCatalog, rust_axum: Target) -> None:
        changes = [_unsupported(f, rust_axum) for f in (K.I18N, K.DOMAIN_EVENTS)]
        (note,) = build_notifications(changes, catalog, rust_axum, max_listed=1)
        assert note.message.startswith("2 features")


class TestCascadeNotifications:
    def test_required_by(self, engine, java_spring, empty_state) -> None:
        result = engine.enable(empty_state, java_spring, K.PASSWORD_RESET)
        note = engine.notification_for(result)
        assert note is not None
        assert note.level == "info"
        assert note.title == "Dependency Enabled"
        assert note.message == "Mail Service was automatically enabled (required by Password Reset)."

    def test_requires_plural(self, engine, java_spring, state_of) -> None:
        state = state_of(K.PASSWORD_RESET, K.MAIL_SERVICE, K.JTE_TEMPLATES)
        result = engine.disable(state, java_spring, K.MAIL_SERVICE)
        (note,) = engine.notifications_for(result)
        assert note.title == "Dependent Features Disabled"
        assert note.message == (
            "Password Reset, JTE Templates were automatically disabled (depend on Mail Service)."
        )

    def test_requires_singular(self, engine, java_spring, state_of) -> None:
        result = engine.disable(state_of(K.PASSWORD_RESET, K.MAIL_SERVICE), java_spring, K.MAIL_SERVICE)
        note = engine.notification_for(result)
        assert note is not None
        assert note.message == "Password Reset was automatically disabled (depends on Mail Service)."

    def test_language_change_groups_by_cause(self, engine, java_spring, state_of) -> None:
        state = state_of(K.HATEOAS, K.DOMAIN_EVENTS, K.SSE_UPDATES)
        result = engine.change_language(state, java_spring, Language.GO)
        notes = engine.notifications_for(result)
        assert [n.level for n in notes] == ["warning", "info"]
        assert notes[0].message == (
            "HATEOAS Links, Domain Events are not supported by Go and have been disabled."
        )
        assert notes[1].message == "SSE Updates was automatically disabled (depends on Domain Events)."


class TestEdgeCases:
    def test_no_changes(self, catalog: FeatureCatalog, rust_axum: Target) -> None:
        assert build_notifications([], catalog, rust_axum) == []

    def test_nothing_changed_gives_none(self, engine, java_spring, empty_state) -> None:
        result = engine.enable(empty_state, java_spring, K.CACHING)
        assert engine.notification_for(result) is None

    def test_invalid_threshold(self, catalog: FeatureCatalog, rust_axum: Target) -> None:
        with pytest.raises(ValueError):
            build_notifications([], catalog, rust_axum, max_listed=0)

    def test_str(self) -> None:
        note = Notification(level="info", title="T", message="M")
        assert str(note) == "[info] T: M"
