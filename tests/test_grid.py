"""Tests for dense altitude x time field construction."""

import numpy as np
import pytest

from meteogram.analysis.grid import (
    DenseField,
    altitude_range,
    build_field,
    dew_point_depression_of,
    fill_gaps,
    ground_temperature_of,
    padded_altitude_range,
    temperature_of,
    wind_speed_of,
)


@pytest.fixture
def two_level_series(series_factory):
    return series_factory([(1000.0, 10.0, None), (3000.0, 0.0, None)], steps=3, ground_temp=20.0)


class TestAltitudeRange:
    def test_observed_range(self, two_level_series):
        assert altitude_range(two_level_series) == (1000.0, 3000.0)

    def test_padding_is_fraction_of_span(self, two_level_series):
        assert padded_altitude_range(two_level_series, 0.1) == pytest.approx((800.0, 3200.0))

    def test_flat_range_gets_fixed_padding(self, series_factory):
        series = series_factory([(5000.0, 1.0, None)], steps=2)
        assert padded_altitude_range(series) == (4500.0, 5500.0)

    def test_empty_series(self):
        assert altitude_range([]) is None
        assert padded_altitude_range([]) is None


class TestBuildField:
    def test_shape_and_bounds(self, two_level_series):
        field = build_field(two_level_series, resolution=5)

        assert field.values.shape == (5, 3)
        assert field.min_alt == pytest.approx(800.0)
        assert field.max_alt == pytest.approx(3200.0)
        assert field.resolution == 5

    def test_linear_interpolation_and_constant_extrapolation(self, two_level_series):
        field = build_field(two_level_series, resolution=5)

        np.testing.assert_allclose(field.values[:, 0], [10.0, 8.0, 5.0, 2.0, 0.0])

    def test_ground_value_blends_below_lowest_sample(self, two_level_series):
        field = build_field(
            two_level_series, resolution=5, ground_value_of=ground_temperature_of,
        )

        # 800 ft is 80% of the way from the ground to the 1000 ft sample
        assert field.values[0, 0] == pytest.approx(12.0)
        # Above the lowest sample the ground value has no effect
        np.testing.assert_allclose(field.values[1:, 0], [8.0, 5.0, 2.0, 0.0])

    def test_ground_ratio_clamped_below_sea_level(self, series_factory):
        series = series_factory([(200.0, 10.0, None), (5200.0, 0.0, None)], steps=1, ground_temp=20.0)

        field = build_field(series, resolution=3, ground_value_of=ground_temperature_of)

        # Negative altitudes clamp to the ground value itself
        assert field.min_alt == pytest.approx(-300.0)
        assert field.values[0, 0] == pytest.approx(20.0)

    def test_missing_ground_value_ignored(self, series_factory):
        series = series_factory([(1000.0, 10.0, None), (3000.0, 0.0, None)], steps=1, ground_temp=None)

        field = build_field(series, resolution=5, ground_value_of=ground_temperature_of)

        assert field.values[0, 0] == pytest.approx(10.0)

    def test_value_accessor_selects_quantity(self, series_factory):
        series = series_factory(
            [(1000.0, 10.0, 4.0), (3000.0, 0.0, -8.0)], steps=1, wind_speeds=[30.0, 90.0],
        )

        speed = build_field(series, resolution=5, value_of=wind_speed_of)
        depression = build_field(series, resolution=5, value_of=dew_point_depression_of)

        np.testing.assert_allclose(speed.values[:, 0], [30.0, 42.0, 60.0, 78.0, 90.0])
        np.testing.assert_allclose(depression.values[:, 0], [6.0, 6.4, 7.0, 7.6, 8.0])

    def test_column_with_one_usable_sample_is_nan(self, series_factory):
        series = series_factory([(1000.0, 10.0, None), (3000.0, 0.0, None)], steps=3)
        series[1].samples[1].temperature = None

        field = build_field(series, resolution=5)

        assert np.isnan(field.values[:, 1]).all()
        assert np.isfinite(field.values[:, 0]).all()
        assert np.isfinite(field.values[:, 2]).all()

    def test_every_finite_value_within_sample_range(self, winter_series):
        field = build_field(winter_series, resolution=50)

        lo, hi = np.nanmin(field.values), np.nanmax(field.values)
        assert lo >= -25.0
        assert hi <= 5.0

    def test_empty_series(self):
        field = build_field([])
        assert field.is_empty

    def test_first_profile_without_samples(self, series_factory):
        series = series_factory([(1000.0, 10.0, None), (3000.0, 0.0, None)], steps=2)
        series[0].samples = []

        assert build_field(series).is_empty

    def test_resolution_below_two_rejected(self, two_level_series):
        with pytest.raises(ValueError, match="resolution"):
            build_field(two_level_series, resolution=1)

    def test_default_accessor_is_temperature(self, two_level_series):
        a = build_field(two_level_series, resolution=7)
        b = build_field(two_level_series, resolution=7, value_of=temperature_of)
        np.testing.assert_array_equal(a.values, b.values)


class TestFillGaps:
    def test_interior_gap_interpolated(self):
        values = np.array([[0.0], [np.nan], [np.nan], [3.0]])
        np.testing.assert_allclose(fill_gaps(values)[:, 0], [0.0, 1.0, 2.0, 3.0])

    def test_edge_gaps_copy_nearest(self):
        values = np.array([[np.nan], [5.0], [7.0], [np.nan]])
        np.testing.assert_allclose(fill_gaps(values)[:, 0], [5.0, 5.0, 7.0, 7.0])

    def test_all_nan_column_untouched(self):
        values = np.array([[1.0, np.nan], [2.0, np.nan]])
        filled = fill_gaps(values)
        assert np.isnan(filled[:, 1]).all()
        np.testing.assert_array_equal(filled[:, 0], [1.0, 2.0])

    def test_input_not_modified(self):
        values = np.array([[np.nan], [1.0]])
        fill_gaps(values)
        assert np.isnan(values[0, 0])


class TestDenseField:
    def test_map_values_keeps_geometry(self):
        field = DenseField(np.array([[10.0], [20.0]]), 100.0, 200.0, 2)

        doubled = field.map_values(lambda v: v * 2)

        np.testing.assert_array_equal(doubled.values, [[20.0], [40.0]])
        assert (doubled.min_alt, doubled.max_alt, doubled.resolution) == (100.0, 200.0, 2)
