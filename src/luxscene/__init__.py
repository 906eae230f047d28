"""
luxscene - Scene description compiler for LuxRender-style offline renderers

This package provides tools for:
- Accumulating render settings, lights, geometry, materials, volumes and
  textures in a scene graph through typed constructors
- Compiling the graph into renderer statements, split across linked files
- Exporting the result as loose files or a single zip archive
"""

__version__ = "0.1.0"
