"""Scene Compiler - converts scene graphs to renderer statements."""
from .compiler import CompiledScene, SceneCompiler
from .formatting import format_param, format_value

__all__ = ["CompiledScene", "SceneCompiler", "format_param", "format_value"]
