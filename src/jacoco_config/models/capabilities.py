"""Plugin identifiers and the capability set derived from them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


class PluginId(Enum):
    """Gradle plugin identifiers that influence report planning."""

    ANDROID_APPLICATION = "com.android.application"
    ANDROID_LIBRARY = "com.android.library"
    ANDROID_FEATURE = "com.android.feature"
    ANDROID_DYNAMIC_FEATURE = "com.android.dynamic-feature"
    ANDROID_INSTANT_APP = "com.android.instantapp"
    ANDROID_TEST = "com.android.test"
    JAVA = "java"
    JAVA_LIBRARY = "java-library"
    JAVA_GRADLE_PLUGIN = "java-gradle-plugin"
    KOTLIN_JVM = "org.jetbrains.kotlin.jvm"
    KOTLIN_ANDROID = "org.jetbrains.kotlin.android"
    KOTLIN_MULTIPLATFORM = "org.jetbrains.kotlin.multiplatform"

    @classmethod
    def lookup(cls, value: str) -> PluginId | None:
        """Return the member for *value*, or ``None`` for unknown plugins."""
        try:
            return cls(value)
        except ValueError:
            return None


_JAVA_PLUGINS = frozenset(
    {PluginId.JAVA, PluginId.JAVA_LIBRARY, PluginId.JAVA_GRADLE_PLUGIN, PluginId.KOTLIN_JVM}
)


class ProjectKind(Enum):
    """Branch of the planner chosen for a project, in precedence order."""

    ANDROID_APPLICATION = "android_application"
    ANDROID_LIBRARY = "android_library"
    ANDROID_DYNAMIC_FEATURE = "android_dynamic_feature"
    KOTLIN_MULTIPLATFORM_JVM = "kotlin_multiplatform_jvm"
    JVM = "jvm"
    NONE = "none"

    @property
    def is_android(self) -> bool:
        return self in {
            ProjectKind.ANDROID_APPLICATION,
            ProjectKind.ANDROID_LIBRARY,
            ProjectKind.ANDROID_DYNAMIC_FEATURE,
        }


@dataclass(frozen=True)
class BuildCapabilities:
    """Which coverage-relevant ecosystems are present in a project.

    Computed once from the applied plugin identifiers and never re-queried
    while a plan is being derived.
    """

    has_java_plugin: bool = False
    has_kotlin_jvm_plugin: bool = False
    """KMP with a JVM target, or Kotlin-Android."""
    has_android_application: bool = False
    has_android_library: bool = False
    has_android_dynamic_feature: bool = False

    @classmethod
    def from_plugin_ids(
        cls,
        plugin_ids: Iterable[str | PluginId],
        *,
        has_jvm_target: bool = False,
    ) -> BuildCapabilities:
        """Derive capabilities from applied plugin identifiers.

        ``has_jvm_target`` tells whether a Kotlin-Multiplatform project
        declares a JVM target; without one KMP contributes nothing.
        """
        ids: set[PluginId] = set()
        for raw in plugin_ids:
            plugin = raw if isinstance(raw, PluginId) else PluginId.lookup(raw)
            if plugin is not None:
                ids.add(plugin)

        kmp_jvm = PluginId.KOTLIN_MULTIPLATFORM in ids and has_jvm_target
        return cls(
            has_java_plugin=bool(ids & _JAVA_PLUGINS),
            has_kotlin_jvm_plugin=kmp_jvm or PluginId.KOTLIN_ANDROID in ids,
            has_android_application=PluginId.ANDROID_APPLICATION in ids,
            has_android_library=PluginId.ANDROID_LIBRARY in ids,
            has_android_dynamic_feature=bool(
                ids & {PluginId.ANDROID_DYNAMIC_FEATURE, PluginId.ANDROID_FEATURE}
            ),
        )

    @property
    def has_android(self) -> bool:
        """Return True when any Android plugin with unit-test variants is applied."""
        return (
            self.has_android_application
            or self.has_android_library
            or self.has_android_dynamic_feature
        )

    @property
    def is_empty(self) -> bool:
        return self.kind is ProjectKind.NONE

    @property
    def kind(self) -> ProjectKind:
        """Return the single planner branch these capabilities select."""
        if self.has_android_application:
            return ProjectKind.ANDROID_APPLICATION
        if self.has_android_library:
            return ProjectKind.ANDROID_LIBRARY
        if self.has_android_dynamic_feature:
            return ProjectKind.ANDROID_DYNAMIC_FEATURE
        if self.has_kotlin_jvm_plugin:
            return ProjectKind.KOTLIN_MULTIPLATFORM_JVM
        if self.has_java_plugin:
            return ProjectKind.JVM
        return ProjectKind.NONE
