"""Camera module.

Components:
    thin_lens: Thin-lens camera with field of view and depth of field

thin_lens declares Taichi fields; import it directly after ti.init().
"""
