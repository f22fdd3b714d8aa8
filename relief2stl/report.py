"""Post-export sanity check of an STL file, using trimesh."""

from dataclasses import dataclass

import trimesh


@dataclass
class MeshReport:
    faces: int
    vertices: int
    watertight: bool
    winding_consistent: bool
    volume: float
    extents: tuple

    def summary(self) -> str:
        ex = ", ".join(f"{e:.3f}" for e in self.extents)
        return (f"{self.faces:,} faces  |  {self.vertices:,} vertices  |  "
                f"watertight={self.watertight}  winding_consistent={self.winding_consistent}  |  "
                f"volume={self.volume:.3f} mm³  |  extents=({ex}) mm")


def mesh_report(path) -> MeshReport:
    """Load an STL (vertices merged on load) and report its closure and volume."""
    mesh = trimesh.load(str(path), file_type="stl", force="mesh")
    report = MeshReport(
        faces=len(mesh.faces),
        vertices=len(mesh.vertices),
        watertight=bool(mesh.is_watertight),
        winding_consistent=bool(mesh.is_winding_consistent),
        volume=float(mesh.volume),
        extents=tuple(float(e) for e in mesh.extents),
    )
    print(f"[report] {report.summary()}")
    return report
