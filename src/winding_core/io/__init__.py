"""Debug mesh export."""

from .mesh_writer import write_mesh, dump_component, dump_cells
