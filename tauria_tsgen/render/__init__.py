"""Rendering of the analysis model into TypeScript artifacts."""

from .artifacts import Artifact, build_artifacts
from .renderer import Renderer, TemplateRenderer

__all__ = ["Artifact", "Renderer", "TemplateRenderer", "build_artifacts"]
