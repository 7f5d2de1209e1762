# arc_length_table_benchmark.py
# Run with: PYTHONPATH=./src python3 src/examples/qnd/arc_length_table_benchmark.py

import timeit

import numpy as np

from flightpath.spline import CatmullRom

# A path with 5 intermediate waypoints, as for the hardest difficulty
WAYPOINTS = np.array(
    [
        (-9.0, 2.0, -6.0),
        (-5.0, 4.0, -2.0),
        (-1.0, 2.5, 1.0),
        (2.0, 5.0, -1.0),
        (5.0, 3.0, 3.0),
        (7.0, 4.5, 4.0),
        (9.0, 3.0, 6.0),
    ]
)
EXTENDED = CatmullRom.add_phantom_points(WAYPOINTS)

SAMPLES_LIST = [10, 20, 30, 50, 100, 200]


# Version 1: pure Python loop with one kernel evaluation per sample
def python_loop(samples: int):
    table = [0.0]
    total = 0.0
    for segment in range(EXTENDED.shape[0] - 3):
        p0, p1, p2, p3 = EXTENDED[segment : segment + 4]
        previous = CatmullRom.point(p0, p1, p2, p3, 0.0)
        for i in range(1, samples + 1):
            current = CatmullRom.point(p0, p1, p2, p3, i / samples)
            total += float(np.linalg.norm(current - previous))
            table.append(total)
            previous = current
    return table


# Version 2: NumPy vectorized per segment
def numpy_table(samples: int):
    return CatmullRom.build_arc_length_table(EXTENDED, samples)


versions = {
    "Python loop": python_loop,
    "NumPy": numpy_table,
}

print("Arc-length table benchmark (lower = better)")
print("Samples |   Python loop    |      NumPy       | Fastest")
print("-" * 60)

for samples in SAMPLES_LIST:
    assert np.allclose(python_loop(samples), numpy_table(samples))

    timings = {}
    repeats = max(1, 20_000 // samples)
    for name, func in versions.items():
        dt = timeit.timeit(lambda: func(samples), number=repeats)
        timings[name] = dt * 1000 / repeats  # ms per call

    fastest = min(timings, key=timings.get)
    print(f"{samples:7} |  {timings['Python loop']:9.3f} ms  |  {timings['NumPy']:9.3f} ms  | {fastest}")
