"""Translucent textured quad visual for image particles."""

from __future__ import annotations

from typing import Any

import numpy as np
from vispy import gloo
from vispy.scene.visuals import create_visual_node
from vispy.visuals import Visual

from .viz_utils import unit_quad

_VERT_SHADER = """
attribute vec3 a_position;
attribute vec2 a_texcoord;
varying vec2 v_texcoord;

void main() {
    v_texcoord = a_texcoord;
    gl_Position = $transform(vec4(a_position, 1.0));
}
"""

_FRAG_SHADER = """
uniform sampler2D u_texture;
uniform float u_opacity;
varying vec2 v_texcoord;

void main() {
    vec4 tex_color = texture2D(u_texture, v_texcoord);
    gl_FragColor = vec4(tex_color.rgb, tex_color.a * u_opacity);
}
"""


class ImageQuadVisual(Visual):
    def __init__(
        self,
        texture: np.ndarray | None = None,
        opacity: float = 0.8,
        **kwargs: Any,
    ) -> None:
        Visual.__init__(self, vcode=_VERT_SHADER, fcode=_FRAG_SHADER, **kwargs)
        vertices, faces, texcoords = unit_quad()
        self._vertex_data = np.asarray(vertices, dtype=np.float32)
        self._vertices = gloo.VertexBuffer(self._vertex_data)
        self._texcoords = gloo.VertexBuffer(texcoords)
        self._index_buffer = gloo.IndexBuffer(faces)
        self._texture = gloo.Texture2D(np.zeros((2, 2, 4), dtype=np.uint8))
        self._opacity = float(opacity)
        self._data_changed = True
        self._draw_mode = "triangles"
        self.set_gl_state("translucent", depth_test=True, cull_face=False)
        if texture is not None:
            self.set_texture(texture)
        self.freeze()

    def set_texture(self, texture: np.ndarray) -> None:
        tex = np.asarray(texture, dtype=np.uint8)
        if tex.ndim != 3 or tex.shape[2] != 4:
            raise ValueError("texture must have shape (H, W, 4)")
        self._texture = gloo.Texture2D(tex, interpolation="linear", wrapping="clamp_to_edge")
        self._data_changed = True
        self.update()

    def _prepare_draw(self, view: Any) -> None:
        if self._data_changed:
            self.shared_program["a_position"] = self._vertices
            self.shared_program["a_texcoord"] = self._texcoords
            self.shared_program["u_texture"] = self._texture
            self.shared_program["u_opacity"] = self._opacity
            self._data_changed = False

    @staticmethod
    def _prepare_transforms(view: Any) -> None:
        view.view_program.vert["transform"] = view.transforms.get_transform()

    def _compute_bounds(self, axis: int, view: Any) -> tuple[float, float] | None:
        data = self._vertex_data
        return (float(np.min(data[:, axis])), float(np.max(data[:, axis])))


ImageQuad = create_visual_node(ImageQuadVisual)
