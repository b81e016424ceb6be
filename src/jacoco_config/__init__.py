"""jacoco-config — Jacoco report task planning for Gradle builds."""

__version__ = "0.1.0"
