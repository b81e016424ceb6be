"""Plugin detector — read applied plugin identifiers from Gradle build scripts."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from jacoco_config.models.capabilities import BuildCapabilities, PluginId

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

BUILD_SCRIPT_NAMES: tuple[str, ...] = ("build.gradle.kts", "build.gradle")

# ``id("com.android.library")``, ``id 'java'``, ``id "x" version "1"``
_ID_RE = re.compile(r"""\bid\s*\(?\s*['"]([\w.\-]+)['"]""")
# ``apply plugin: 'com.android.application'`` / ``apply(plugin = "java")``
_APPLY_RE = re.compile(r"""\bapply\s*\(?\s*plugin\s*[:=]\s*['"]([\w.\-]+)['"]""")
# ``kotlin("multiplatform")`` shorthand for ``org.jetbrains.kotlin.*``
_KOTLIN_RE = re.compile(r"""\bkotlin\s*\(\s*['"]([\w.\-]+)['"]\s*\)""")
# Back-ticked core plugins in the Kotlin DSL: `java-library`
_BACKTICK_RE = re.compile(r"`([\w\-]+)`")
# ``alias(libs.plugins.android.application)``
_ALIAS_RE = re.compile(r"""\balias\s*\(\s*libs\.plugins\.([\w.]+)\s*\)""")
_PLUGINS_BLOCK_RE = re.compile(r"\bplugins\s*\{([^}]*)\}", re.DOTALL)
_BARE_CORE_RE = re.compile(r"^\s*(java|java-library|java-gradle-plugin)\s*$", re.MULTILINE)
_LINE_COMMENT_RE = re.compile(r"//[^\n]*")
_BLOCK_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_JVM_TARGET_RE = re.compile(r"\bjvm\s*[({]")

_ALIAS_SUFFIXES: dict[str, PluginId] = {
    "android.application": PluginId.ANDROID_APPLICATION,
    "android.library": PluginId.ANDROID_LIBRARY,
    "android.dynamic.feature": PluginId.ANDROID_DYNAMIC_FEATURE,
    "android.dynamicfeature": PluginId.ANDROID_DYNAMIC_FEATURE,
    "kotlin.android": PluginId.KOTLIN_ANDROID,
    "kotlin.jvm": PluginId.KOTLIN_JVM,
    "kotlin.multiplatform": PluginId.KOTLIN_MULTIPLATFORM,
}


def _strip_comments(text: str) -> str:
    return _LINE_COMMENT_RE.sub("", _BLOCK_COMMENT_RE.sub("", text))


def read_plugin_ids(script_text: str) -> set[str]:
    """Return every plugin identifier a build script applies."""
    text = _strip_comments(script_text)
    ids: set[str] = set()
    ids.update(_ID_RE.findall(text))
    ids.update(_APPLY_RE.findall(text))
    ids.update(f"org.jetbrains.kotlin.{name}" for name in _KOTLIN_RE.findall(text))

    for block in _PLUGINS_BLOCK_RE.findall(text):
        ids.update(_BACKTICK_RE.findall(block))
        ids.update(_BARE_CORE_RE.findall(block))

    for alias in _ALIAS_RE.findall(text):
        normalized = alias.lower().replace("_", ".").replace("-", ".")
        for suffix, plugin in _ALIAS_SUFFIXES.items():
            if normalized.endswith(suffix):
                ids.add(plugin.value)
                break
    return ids


def has_jvm_target(script_text: str) -> bool:
    """Return True if a Kotlin-Multiplatform script declares a ``jvm`` target."""
    return bool(_JVM_TARGET_RE.search(_strip_comments(script_text)))


def find_build_script(project_dir: Path) -> Path | None:
    for name in BUILD_SCRIPT_NAMES:
        candidate = project_dir / name
        if candidate.is_file():
            return candidate
    return None


def detect_capabilities(project_dir: Path) -> BuildCapabilities:
    """Read the project's build script and derive its capabilities.

    A project without a readable build script has no capabilities.
    """
    script = find_build_script(project_dir)
    if script is None:
        logger.debug("No build script in %s", project_dir)
        return BuildCapabilities()
    try:
        text = script.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        logger.warning("Could not read %s: %s", script, exc)
        return BuildCapabilities()

    plugin_ids = read_plugin_ids(text)
    logger.debug("%s applies %s", script, sorted(plugin_ids))
    return BuildCapabilities.from_plugin_ids(plugin_ids, has_jvm_target=has_jvm_target(text))
