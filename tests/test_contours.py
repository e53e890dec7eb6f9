"""Tests for contour extraction."""

import numpy as np
import pytest


class TestTraceContour:
    """Tests for the greedy tracer."""

    def test_ring_traced_once(self, ring_edges):
        """Test that a one-pixel ring is traced as a single closed contour."""
        from mathoutline.config import ContourConfig
        from mathoutline.contours.extract import extract_contours

        config = ContourConfig(thin_edges=False)
        contours = extract_contours(ring_edges, config)

        assert len(contours) == 1
        assert len(contours[0]) == 60
        assert contours[0][0] == (5, 5)

    def test_ring_with_thinning(self, ring_edges):
        """Test that thinning keeps the ring traceable."""
        from mathoutline.contours.extract import extract_contours

        contours = extract_contours(ring_edges)

        assert len(contours) == 1
        assert len(contours[0]) >= 50

    def test_short_contours_discarded(self):
        """Test that traces below min_length are dropped."""
        from mathoutline.contours.extract import extract_contours

        edges = np.zeros((20, 20), dtype=np.uint8)
        edges[10, 2:12] = 255

        assert extract_contours(edges) == []

    def test_no_pixel_claimed_twice(self, torso_rectangle_image):
        """Test that contours never share pixels."""
        from mathoutline.contours.extract import extract_contours
        from mathoutline.edges.detector import detect_edges

        contours = extract_contours(detect_edges(torso_rectangle_image))

        points = [p for contour in contours for p in contour]
        assert len(points) == len(set(points))

    def test_relaxed_steps_limited(self):
        """Test that at most max_failures relaxed steps are taken in a row."""
        from mathoutline.contours.extract import trace_contour

        values = np.array([[255] + [128] * 10], dtype=np.uint8)
        visited = np.zeros(values.shape, dtype=bool)

        contour = trace_contour(values, visited, 0, 0, threshold=255, max_failures=5)

        assert len(contour) == 6
        assert contour[-1] == (5, 0)
        assert np.count_nonzero(visited) == 6

    def test_weak_pass_picks_up_leftovers(self):
        """Test that a weak-only line is traced in a later threshold pass."""
        from mathoutline.config import ContourConfig
        from mathoutline.contours.extract import extract_contours

        edges = np.zeros((10, 40), dtype=np.uint8)
        edges[5, 5:35] = 128

        contours = extract_contours(edges, ContourConfig(thin_edges=False))

        assert len(contours) == 1
        assert len(contours[0]) == 30

    def test_cancelled_deadline(self, ring_edges):
        """Test that a cancelled run stops tracing."""
        from mathoutline.contours.extract import extract_contours
        from mathoutline.deadline import Deadline, PipelineCancelled

        deadline = Deadline()
        deadline.cancel()

        with pytest.raises(PipelineCancelled):
            extract_contours(ring_edges, deadline=deadline)


class TestRidgeMerging:
    """Tests for collapsing the two ridges of a thin line."""

    @staticmethod
    def _double_ridge():
        edges = np.zeros((20, 40), dtype=np.uint8)
        edges[6:9, 5:35] = 255
        edges[10:13, 5:35] = 255
        return edges

    def test_gap_filled(self):
        """Test that the one-pixel gap between parallel bands is closed."""
        from mathoutline.contours.extract import merge_ridges

        merged = merge_ridges(self._double_ridge())

        assert np.all(merged[9, 5:35] == 255)
        assert not np.any(merged[9, :4])

    def test_traced_as_one_centre_line(self):
        """Test that both ridges become a single contour along the middle."""
        from mathoutline.config import ContourConfig
        from mathoutline.contours.extract import extract_contours

        merged = extract_contours(self._double_ridge())
        separate = extract_contours(self._double_ridge(), ContourConfig(merge_window=0))

        assert len(merged) == 1
        assert sum(1 for _, y in merged[0] if y == 9) >= 20
        assert len(separate) == 2


class TestSpurPruning:
    """Tests for skeleton spur removal."""

    def test_short_spur_removed(self, ring_edges):
        """Test that a three-pixel branch off a ring is pruned back to the ring."""
        from mathoutline.contours.extract import prune_spurs

        ring = ring_edges > 0
        mask = ring.copy()
        mask[12, 21:24] = True

        pruned = prune_spurs(mask, max_length=8, iterations=3)

        assert np.array_equal(pruned, ring)

    def test_open_line_kept(self):
        """Test that a line with no junction is not shortened."""
        from mathoutline.contours.extract import prune_spurs

        mask = np.zeros((10, 10), dtype=bool)
        mask[5, 2:7] = True

        assert np.array_equal(prune_spurs(mask), mask)

    def test_crossing_numbers(self, ring_edges):
        """Test endpoint, curve and junction classification."""
        from mathoutline.contours.extract import crossing_numbers

        mask = ring_edges > 0
        mask[12, 21:24] = True
        crossings = crossing_numbers(mask)

        assert crossings[12, 23] == 1
        assert crossings[12, 22] == 2
        assert crossings[12, 20] == 3
