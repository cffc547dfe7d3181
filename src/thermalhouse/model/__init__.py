"""
The MODEL layer contains pure data structures: the entity snapshot handed in
by the host each tick and the temperature colour scale.
It has NO knowledge of the renderer or the diffusion solver.
"""
