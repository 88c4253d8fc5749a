"""
Half-edge mesh normal estimation: vertex, face and crease-aware corner normals.
"""
