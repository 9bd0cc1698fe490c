"""Tests for the gray-level remap and edge reconciliation."""

import numpy as np
import pytest

from bevelfield.errors import InvalidInputError
from bevelfield.remap import interior_maximum, reconcile_edges, remap_field, to_byte


@pytest.fixture
def ramp():
    """5x5 shape with a one-pixel boundary frame and a 3x3 interior ramp."""
    mask = np.ones((5, 5), dtype=bool)
    boundary = np.zeros_like(mask)
    boundary[0, :] = boundary[-1, :] = boundary[:, 0] = boundary[:, -1] = True
    u = np.zeros((5, 5))
    u[1:4, 1:4] = [[0.1, 0.2, 0.1], [0.2, 0.4, 0.2], [0.1, 0.2, 0.1]]
    return u, mask, boundary


def test_to_byte_rounds_and_clamps():
    values = np.array([-3.0, 0.4, 0.5, 1.5, 127.6, 300.0])
    np.testing.assert_array_equal(to_byte(values), [0, 0, 0, 2, 128, 255])


def test_interior_maximum_empty():
    assert interior_maximum(np.ones((3, 3)), np.zeros((3, 3), dtype=bool)) == 0.0


def test_linear_remap(ramp):
    u, mask, boundary = ramp
    out = remap_field(u, mask, boundary)

    assert out.shape == (5, 5, 2)
    assert out.dtype == np.uint8
    # Peak is black, boundary is white
    assert out[2, 2, 0] == 0
    assert out[0, 0, 0] == 255
    # 0.2 / 0.4 -> half gray
    assert out[1, 2, 0] == 128
    # 0.1 / 0.4 -> 255 * 0.75
    assert out[1, 1, 0] == 191
    assert np.all(out[..., 1] == 255)


def test_contrast_exponent(ramp):
    u, mask, boundary = ramp
    out = remap_field(u, mask, boundary, exponent=2.0)
    # (0.5)^2 -> 255 * 0.75
    assert out[1, 2, 0] == 191
    assert out[2, 2, 0] == 0

    softer = remap_field(u, mask, boundary, exponent=0.5)
    assert softer[1, 2, 0] < out[1, 2, 0]


def test_outside_pixels_white_transparent(ramp):
    u, mask, boundary = ramp
    mask = mask.copy()
    boundary = boundary.copy()
    mask[0, 0] = False
    boundary[0, 0] = False

    out = remap_field(u, mask, boundary)
    assert tuple(out[0, 0]) == (255, 0)
    assert tuple(out[0, 1]) == (255, 255)


def test_zero_field_is_flat_white(ramp):
    _, mask, boundary = ramp
    out = remap_field(np.zeros((5, 5)), mask, boundary)
    assert np.all(out[..., 0] == 255)
    assert np.all(out[mask, 1] == 255)


def test_empty_interior_is_flat_white():
    mask = np.zeros((4, 4), dtype=bool)
    mask[1:3, 1:3] = True
    out = remap_field(np.zeros((4, 4)), mask, mask.copy())
    assert np.all(out[..., 0] == 255)
    assert np.all(out[mask, 1] == 255)
    assert np.all(out[~mask, 1] == 0)


class TestReconcileEdges:
    def make_source(self):
        source = np.zeros((2, 3, 4), dtype=np.uint8)
        source[0, 0] = (10, 20, 30, 255)   # opaque ink
        source[0, 1] = (10, 20, 30, 128)   # anti-aliased edge
        source[0, 2] = (255, 255, 255, 255)  # opaque white: outside
        source[1, 0] = (10, 20, 30, 0)     # transparent: outside
        source[1, 1] = (10, 20, 30, 64)
        source[1, 2] = (10, 20, 30, 255)
        return source

    def test_rules(self):
        source = self.make_source()
        upsampled = np.array(
            [[(40, 255), (90, 200), (12, 255)],
             [(70, 255), (150, 0), (33, 10)]],
            dtype=np.uint8,
        )
        out = reconcile_edges(upsampled, source)

        # Inside: upsampled gray, source alpha as coverage
        assert tuple(out[0, 0]) == (40, 255)
        assert tuple(out[0, 1]) == (90, 128)
        assert tuple(out[1, 2]) == (33, 255)
        # Inside but zero upsampled coverage: gray 0
        assert tuple(out[1, 1]) == (0, 64)
        # Outside whatever the upsample says
        assert tuple(out[0, 2]) == (255, 0)
        assert tuple(out[1, 0]) == (255, 0)

    def test_inputs_not_modified(self):
        source = self.make_source()
        upsampled = np.full((2, 3, 2), 100, dtype=np.uint8)
        source_before, upsampled_before = source.copy(), upsampled.copy()

        reconcile_edges(upsampled, source)

        np.testing.assert_array_equal(source, source_before)
        np.testing.assert_array_equal(upsampled, upsampled_before)

    def test_shape_mismatch(self):
        with pytest.raises(InvalidInputError):
            reconcile_edges(np.zeros((3, 3, 2), dtype=np.uint8), self.make_source())
