import logging

from cghull import QuickHull3D

if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)
    raw = [
        (0,0,0), (1,0,0), (1,1,0), (0,1,0),
        (0,0,1), (1,0,1), (1,1,1), (0,1,1),
        (0.5,0.5,0.5), (0.2,0.8,0.3), (0.8,0.2,0.7)
    ]
    hull = QuickHull3D(1e-10).generate(raw)

    print("VERTICES:", len(hull.vertices), "FACETS:", len(hull.facets))
    for f in hull.facets:
        print("  ", f.vertices, "normal", tuple(round(c, 6) for c in f.plane.normal))
    print("VOLUME:", hull.region.size)

    flat = QuickHull3D(1e-10).generate([(0,0,0), (1,0,0), (2,0,0), (3,0,0)])
    print("COLLINEAR:", flat, "region =", flat.region)
