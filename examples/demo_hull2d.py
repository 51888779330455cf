import logging
import random

from cghull import ConvexHull2DBuilder, MonotoneChain, reduce_points

if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)
    pts = [(0, 0), (1, 0), (2, 0), (1, 1)]
    print("WITHOUT COLLINEAR:", MonotoneChain(False, 1e-10).generate(pts))
    print("WITH COLLINEAR:   ", MonotoneChain(True, 1e-10).generate(pts))

    rnd = random.Random(7)
    cloud = [(rnd.uniform(-1, 1), rnd.uniform(-1, 1)) for _ in range(2000)]
    reduced = reduce_points(cloud)
    print(f"Akl-Toussaint: {len(cloud)} -> {len(reduced)} candidates")

    builder = ConvexHull2DBuilder(precision=1e-10)
    for p in cloud:
        builder.append(p)
    hull = builder.build()
    print("HULL:", len(hull), "vertices, area =", hull.region.size)
