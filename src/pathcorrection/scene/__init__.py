"""
The SCENE layer turns points into renderable triangle meshes and holds the
orbit camera. It is plain numpy and does not import Qt or VTK.
"""
