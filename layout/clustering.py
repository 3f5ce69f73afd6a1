"""
One-dimensional clustering of x positions into columns.

Centroids are seeded at evenly spaced points between the smallest and the
largest position, never at random, so identical input always yields the
same clusters. An empty cluster is re-seeded on the point farthest from
its centroid. Iteration stops when no label changes or after
`max_iterations` rounds.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np


@dataclass
class ClusterResult:
    clusters: List[List[float]] = field(default_factory=list)   # sorted by centroid
    centroids: List[float] = field(default_factory=list)
    labels: List[int] = field(default_factory=list)             # per input position, pre-sort ids
    iterations: int = 0


def kmeans_1d(positions: Sequence[float], k: int, max_iterations: int = 100) -> ClusterResult:
    pts = np.asarray(list(positions), dtype=float)
    n = len(pts)
    if n == 0 or k <= 0:
        return ClusterResult()

    if k >= n:
        order = np.argsort(pts, kind="stable")
        labels = [0] * n
        for rank, i in enumerate(order):
            labels[int(i)] = rank
        return ClusterResult(
            clusters=[[float(pts[i])] for i in order],
            centroids=[float(pts[i]) for i in order],
            labels=labels,
        )

    lo, hi = float(pts.min()), float(pts.max())
    centroids = np.array([lo + (hi - lo) * (i + 1) / (k + 1) for i in range(k)], dtype=float)
    labels = np.full(n, -1, dtype=int)

    iterations = 0
    while iterations < max_iterations:
        # argmin picks the lowest index on equal distance
        dist = np.abs(pts[:, None] - centroids[None, :])
        new_labels = np.argmin(dist, axis=1)
        changed = not np.array_equal(new_labels, labels)
        labels = new_labels
        iterations += 1
        if not changed:
            break
        for j in range(k):
            members = pts[labels == j]
            if len(members):
                centroids[j] = float(members.mean())
        # an empty cluster restarts on the point farthest from its own centroid
        for j in range(k):
            if not np.any(labels == j):
                far = int(np.argmax(np.abs(pts - centroids[labels])))
                centroids[j] = float(pts[far])

    groups = []
    for j in range(k):
        members = sorted(float(p) for p in pts[labels == j])
        if members:
            groups.append((float(centroids[j]), members))
    groups.sort(key=lambda g: g[0])

    return ClusterResult(
        clusters=[g[1] for g in groups],
        centroids=[g[0] for g in groups],
        labels=[int(l) for l in labels],
        iterations=iterations,
    )


def inertia(result: ClusterResult) -> float:
    """Sum of squared distances to the cluster centroid."""
    total = 0.0
    for members, c in zip(result.clusters, result.centroids):
        arr = np.asarray(members, dtype=float)
        total += float(((arr - c) ** 2).sum())
    return total


def detect_natural_separations(positions: Sequence[float], min_gap: float = 20.0) -> List[float]:
    """Midpoints of the gaps >= min_gap between consecutive distinct positions."""
    uniq = sorted(set(float(p) for p in positions))
    seps = []
    for a, b in zip(uniq, uniq[1:]):
        if b - a >= min_gap:
            seps.append((a + b) / 2.0)
    return seps


def find_optimal_clusters(positions: Sequence[float], max_k: int = 10, max_iterations: int = 100) -> int:
    """
    k in 1..max_k with the lowest inertia; the first k wins ties.
    Inertia never grows with k, so callers bound max_k with a prior estimate.
    """
    pts = list(positions)
    if len(pts) <= 1:
        return 1
    best_k, best_score = 1, float("inf")
    for k in range(1, min(max_k, len(pts)) + 1):
        score = inertia(kmeans_1d(pts, k, max_iterations))
        if score < best_score - 1e-9:
            best_score, best_k = score, k
    return best_k
