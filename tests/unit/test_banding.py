"""
Unit tests for LSH band hashing and bucketing.
"""

import numpy as np
import pytest
from lshdedup.detector import NO_TOKEN, band_hash, candidate_probability, compute_bands


class TestBandHash:
    """Test the band slice mixing function."""

    def test_deterministic(self):
        assert band_hash([3, 1, 4]) == band_hash([3, 1, 4])

    def test_order_sensitive(self):
        assert band_hash([1, 2]) != band_hash([2, 1])

    def test_fits_in_64_bits(self):
        value = band_hash([NO_TOKEN] * 8)

        assert 0 <= value < 2**64

    def test_nearby_slices_do_not_collide(self):
        """Small shifts between adjacent values map to different buckets."""
        hashes = {band_hash([a, b]) for a in range(50) for b in range(50)}

        assert len(hashes) == 2500

    def test_accepts_numpy_integers(self):
        assert band_hash(np.array([5, 6], dtype=np.int64)) == band_hash([5, 6])


class TestComputeBands:
    """Test grouping of record columns per band."""

    def test_records_bucketed_per_band(self):
        """Records agreeing on a whole band share its bucket; partial agreement does not."""
        signatures = np.array(
            [
                [1, 1, 7],  # band 0
                [2, 2, 8],  # band 0
                [3, 4, 6],  # band 1
                [5, 5, 5],  # band 1
            ]
        )
        bands = compute_bands(signatures, 2)

        assert len(bands) == 2
        assert sorted(bands[0].values()) == [[0, 1], [2]]
        assert sorted(bands[1].values()) == [[0], [1], [2]]

    def test_bucket_keys_are_band_hashes(self):
        signatures = np.array([[1, 9], [2, 9]])
        bands = compute_bands(signatures, 1)

        assert bands[0][band_hash([1, 2])] == [0]
        assert bands[0][band_hash([9, 9])] == [1]

    def test_single_row_bands(self):
        signatures = np.array([[0, 0, 1], [4, 2, 2]])
        bands = compute_bands(signatures, 2)

        assert sorted(bands[0].values()) == [[0, 1], [2]]
        assert sorted(bands[1].values()) == [[0], [1, 2]]

    def test_tokenless_records_collide(self):
        """Sentinel-only columns share a bucket in every band."""
        signatures = np.array([[NO_TOKEN, NO_TOKEN, 3]] * 4)
        bands = compute_bands(signatures, 2)

        for band in bands:
            assert [0, 1] in band.values()

    def test_every_record_in_one_bucket_per_band(self):
        rng = np.random.default_rng(0)
        signatures = rng.integers(0, 4, size=(12, 30))
        bands = compute_bands(signatures, 4)

        for band in bands:
            members = sorted(r for bucket in band.values() for r in bucket)
            assert members == list(range(30))

    def test_parallel_matches_sequential(self):
        rng = np.random.default_rng(1)
        signatures = rng.integers(0, 3, size=(20, 25))

        assert compute_bands(signatures, 10, max_workers=1) == compute_bands(signatures, 10, max_workers=4)

    def test_indivisible_bands_rejected(self):
        with pytest.raises(ValueError, match="divisible"):
            compute_bands(np.zeros((10, 2), dtype=np.int64), 3)

    def test_non_positive_bands_rejected(self):
        with pytest.raises(ValueError, match="num_bands"):
            compute_bands(np.zeros((10, 2), dtype=np.int64), 0)


class TestCandidateProbability:
    """Test the banding S-curve."""

    def test_extremes(self):
        assert candidate_probability(1.0, 100, 20) == 1.0
        assert candidate_probability(0.0, 100, 20) == 0.0

    def test_monotonic(self):
        values = [candidate_probability(s / 10, 120, 30) for s in range(11)]

        assert values == sorted(values)

    def test_known_value(self):
        # r = 5, b = 20, s = 0.5
        expected = 1 - (1 - 0.5**5) ** 20
        assert candidate_probability(0.5, 100, 20) == pytest.approx(expected)

    def test_indivisible(self):
        with pytest.raises(ValueError):
            candidate_probability(0.5, 10, 3)
