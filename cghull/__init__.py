"""
cghull: опуклі оболонки на площині та в просторі з допуском на похибку float.
2D: фільтр Акла–Туссена + монотонний ланцюг; 3D: Quickhull з conflict-множинами.
"""
import logging

__version__ = "0.2.0"

from cghull.geom import Pt, Pt2, EPS, centroid, unique_points
from cghull.precision import Precision
from cghull.predicates import Line2, Plane, orient2d
from cghull.errors import HullError, InvalidInputError, ConvexityValidationError
from cghull.region import ConvexArea, ConvexVolume
from cghull.akl_toussaint import reduce_points, streaming_reduce
from cghull.hull2d import ConvexHull2D
from cghull.monotone_chain import MonotoneChain, ConvexHull2DBuilder, convex_hull_2d
from cghull.hull import ConvexHull3D, ConvexHull3DBuilder, Facet, QuickHull3D, convex_hull_3d

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Pt", "Pt2", "EPS", "centroid", "unique_points",
    "Precision", "Line2", "Plane",
    "orient2d",
    "HullError", "InvalidInputError", "ConvexityValidationError",
    "ConvexArea", "ConvexVolume",
    "reduce_points", "streaming_reduce",
    "ConvexHull2D", "MonotoneChain", "ConvexHull2DBuilder", "convex_hull_2d",
    "ConvexHull3D", "ConvexHull3DBuilder", "Facet", "QuickHull3D", "convex_hull_3d",
    "__version__",
]
