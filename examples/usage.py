import numpy as np
import bincounter as bc

b = bc.BinCounter(30, 0, 2)

# Log a bunch of distributed data
rng = np.random.default_rng()
for _ in range(10000):
    direction = -1 if rng.random() < 0.5 else 1
    dist = rng.random() ** 2
    b.log(1 + direction * dist)

# Log a few outliers
b.log(5.0)
b.log(-3.0)

print("TotalEntries:", b.total_observations)
print("Mean:", b.mean)
print("A particular bin count:", b.bins[4])
print("\nFull histogram plus info:\n------\n" + b.get_histogram())
