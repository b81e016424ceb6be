"""Tests for detectors/plugins.py — plugin ids from Gradle build scripts."""

from __future__ import annotations

from typing import TYPE_CHECKING

from jacoco_config.detectors.plugins import (
    detect_capabilities,
    find_build_script,
    has_jvm_target,
    read_plugin_ids,
)
from jacoco_config.models.capabilities import BuildCapabilities, ProjectKind

if TYPE_CHECKING:
    from pathlib import Path


_KTS_ANDROID_LIBRARY = """\
plugins {
    id("com.android.library")
    kotlin("android")
    `maven-publish`
}

android {
    namespace = "com.example.lib"
}
"""

_GROOVY_APP = """\
apply plugin: 'com.android.application'
apply plugin: 'kotlin-android'

android {
    compileSdk 34
}
"""

_KTS_MULTIPLATFORM = """\
plugins {
    kotlin("multiplatform") version "1.9.0"
}

kotlin {
    jvm {
        withJava()
    }
    js(IR) { browser() }
}
"""

_GROOVY_JAVA = """\
plugins {
    id 'java-library'
    id "org.jetbrains.kotlin.jvm" version "1.9.0"
}
"""


class TestReadPluginIds:
    def test_kotlin_dsl_ids_and_shorthand(self) -> None:
        ids = read_plugin_ids(_KTS_ANDROID_LIBRARY)
        assert "com.android.library" in ids
        assert "org.jetbrains.kotlin.android" in ids
        assert "maven-publish" in ids

    def test_groovy_apply_plugin(self) -> None:
        ids = read_plugin_ids(_GROOVY_APP)
        assert "com.android.application" in ids

    def test_groovy_ids_with_version(self) -> None:
        assert read_plugin_ids(_GROOVY_JAVA) >= {"java-library", "org.jetbrains.kotlin.jvm"}

    def test_bare_core_plugin_in_block(self) -> None:
        assert "java" in read_plugin_ids("plugins {\n    java\n}\n")

    def test_backticked_core_plugin(self) -> None:
        assert "java-library" in read_plugin_ids("plugins {\n    `java-library`\n}\n")

    def test_version_catalog_aliases(self) -> None:
        script = (
            "plugins {\n"
            "    alias(libs.plugins.android.application)\n"
            "    alias(libs.plugins.kotlin.android)\n"
            "}\n"
        )
        ids = read_plugin_ids(script)
        assert ids >= {"com.android.application", "org.jetbrains.kotlin.android"}

    def test_comments_ignored(self) -> None:
        script = '// id("com.android.library")\n/* apply plugin: "java" */\nplugins { id("base") }\n'
        assert read_plugin_ids(script) == {"base"}


class TestJvmTarget:
    def test_detects_jvm_block(self) -> None:
        assert has_jvm_target(_KTS_MULTIPLATFORM)

    def test_detects_jvm_call(self) -> None:
        assert has_jvm_target("kotlin {\n    jvm()\n}\n")

    def test_no_jvm_target(self) -> None:
        assert not has_jvm_target("kotlin {\n    js(IR) { browser() }\n}\n")


class TestDetectCapabilities:
    def test_android_library(self, tmp_path: Path) -> None:
        (tmp_path / "build.gradle.kts").write_text(_KTS_ANDROID_LIBRARY, encoding="utf-8")
        caps = detect_capabilities(tmp_path)
        assert caps.has_android_library
        assert caps.has_kotlin_jvm_plugin
        assert caps.kind is ProjectKind.ANDROID_LIBRARY

    def test_multiplatform_with_jvm(self, tmp_path: Path) -> None:
        (tmp_path / "build.gradle.kts").write_text(_KTS_MULTIPLATFORM, encoding="utf-8")
        assert detect_capabilities(tmp_path).kind is ProjectKind.KOTLIN_MULTIPLATFORM_JVM

    def test_groovy_java(self, tmp_path: Path) -> None:
        (tmp_path / "build.gradle").write_text(_GROOVY_JAVA, encoding="utf-8")
        assert detect_capabilities(tmp_path).kind is ProjectKind.JVM

    def test_kts_preferred_over_groovy(self, tmp_path: Path) -> None:
        (tmp_path / "build.gradle.kts").write_text('plugins { id("java") }\n', encoding="utf-8")
        (tmp_path / "build.gradle").write_text("apply plugin: 'com.android.library'\n")
        assert find_build_script(tmp_path) == tmp_path / "build.gradle.kts"
        assert detect_capabilities(tmp_path).kind is ProjectKind.JVM

    def test_no_build_script(self, tmp_path: Path) -> None:
        assert detect_capabilities(tmp_path) == BuildCapabilities()
