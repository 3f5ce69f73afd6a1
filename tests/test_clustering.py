from layout.clustering import detect_natural_separations, find_optimal_clusters, inertia, kmeans_1d

POSITIONS = [250, 10, 102, 11, 251, 12, 100]


def test_kmeans_groups_and_orders_clusters():
    res = kmeans_1d(POSITIONS, 3)
    assert res.clusters == [[10.0, 11.0, 12.0], [100.0, 102.0], [250.0, 251.0]]
    assert res.centroids == sorted(res.centroids)


def test_kmeans_is_deterministic():
    a = kmeans_1d(POSITIONS, 3)
    b = kmeans_1d(list(reversed(POSITIONS)), 3)
    assert a.clusters == b.clusters
    assert a.centroids == b.centroids


def test_kmeans_respects_iteration_bound():
    assert kmeans_1d(POSITIONS, 3, max_iterations=1).iterations == 1


def test_kmeans_more_clusters_than_points():
    res = kmeans_1d([30, 10], 5)
    assert res.clusters == [[10.0], [30.0]]
    assert inertia(res) == 0.0


def test_kmeans_empty_input():
    assert kmeans_1d([], 3).clusters == []


def test_natural_separations_are_gap_midpoints():
    assert detect_natural_separations(POSITIONS, 20) == [56.0, 176.0]
    assert detect_natural_separations([1, 2, 3], 20) == []


def test_optimal_k():
    assert find_optimal_clusters(POSITIONS, max_k=3) == 3
    assert find_optimal_clusters([42], max_k=5) == 1
