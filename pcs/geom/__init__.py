"""Geometry engine.

Pure functions over points, transforms and keyframe tracks. Nothing in this
package touches the UI, the filesystem or global state; the editor document,
the importer/exporter and the Qt adapter all call into it with the same
parameters so canvas and exported artifact stay in parity.
"""

from __future__ import annotations
