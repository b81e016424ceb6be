"""Build variant descriptors."""

from __future__ import annotations

from dataclasses import dataclass

_MAX_VARIANT_PARTS = 3


def capitalize(value: str) -> str:
    """Upper-case the first character only, the way Gradle task names do."""
    return value[:1].upper() + value[1:]


@dataclass(frozen=True)
class VariantDescriptor:
    """A registered build variant (build type x product flavor)."""

    name: str
    build_type: str = ""
    product_flavor: str = ""

    @property
    def source_name(self) -> str:
        """Name used for tasks, source sets and report directories.

        Collapses to the build type when no product flavor is present.
        """
        if not self.product_flavor and self.build_type:
            return self.build_type
        return self.name

    @classmethod
    def parse(cls, text: str) -> VariantDescriptor:
        """Parse ``name[:buildType[:productFlavor]]``.

        Example: ``"paidDebug:debug:paid"``.
        """
        parts = [part.strip() for part in text.split(":")]
        if len(parts) > _MAX_VARIANT_PARTS:
            raise ValueError(f"Expected name[:buildType[:productFlavor]], got {text!r}")
        parts.extend([""] * (_MAX_VARIANT_PARTS - len(parts)))
        name, build_type, product_flavor = parts
        return cls(name=name, build_type=build_type, product_flavor=product_flavor)

    def to_dict(self) -> dict[str, str]:
        return {
            "name": self.name,
            "build_type": self.build_type,
            "product_flavor": self.product_flavor,
        }


DEFAULT_JVM_VARIANT = VariantDescriptor(name="test")
"""Implicit descriptor of plain Java / Kotlin-JVM projects."""

DEFAULT_KMP_VARIANT = VariantDescriptor(name="jvmTest")
"""Implicit descriptor of Kotlin-Multiplatform projects with a JVM target."""
