"""
Safe High-Pass Stage Tests

Validates record-level behaviour of the stage: configuration errors,
chunk and sample paths, gap preservation, envelope passthrough, and the
asymmetric state-advance rule for gaps.
"""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from decimal import Decimal

import numpy as np
import pytest
from scipy import signal

from eeg_pipes import ConfigError, RecordShapeError, SafeHighpassFilter, safe_highpass_filter
from eeg_pipes.filtering.design import FilterCharacteristic, design_highpass_sos
from eeg_pipes.filtering.filter_bank import FilterBank
from eeg_pipes.pipes.safe_highpass import StageConfig, UnitShape, unit_shape

NAN = float("nan")


def reference_filter(values, order=2, cutoff=60.0, fs=256.0) -> np.ndarray:
    """Filter a gap-free block from zero state with scipy directly."""
    sos = design_highpass_sos(order, "butterworth", cutoff, fs)
    output, _ = signal.sosfilt(sos, np.asarray(values, dtype=float), zi=np.zeros((order, 2)))
    return output


# =============================================================================
# Configuration Tests
# =============================================================================


class TestStageConfig:
    """Tests for construction-time validation."""

    def test_defaults(self) -> None:
        """Cutoff defaults to 2 Hz; characteristic is normalized to the enum."""
        config = StageConfig(n_channels=4)

        assert config.cutoff_frequency == 2.0
        assert config.order == 2
        assert config.sampling_rate == 256.0
        assert config.characteristic is FilterCharacteristic.BUTTERWORTH

    def test_missing_channels(self) -> None:
        """n_channels has no default."""
        with pytest.raises(ConfigError, match="n_channels"):
            StageConfig()

    def test_stage_without_channels(self) -> None:
        """The stage reports a missing channel count before any record."""
        with pytest.raises(ConfigError):
            SafeHighpassFilter(sampling_rate=256, cutoff_frequency=60)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"n_channels": 0},
            {"n_channels": -2},
            {"n_channels": 2.5},
            {"n_channels": True},
            {"order": 0},
            {"order": 1.5},
            {"cutoff_frequency": 0.0},
            {"cutoff_frequency": -5.0},
            {"cutoff_frequency": float("nan")},
            {"sampling_rate": 0.0},
            {"sampling_rate": -256.0},
            {"cutoff_frequency": 128.0},  # at Nyquist for 256 Hz
            {"cutoff_frequency": 300.0},
            {"characteristic": "not-a-filter"},
        ],
    )
    def test_invalid_parameters(self, overrides) -> None:
        """Every invalid parameter is a ConfigError."""
        params = {"n_channels": 2, "sampling_rate": 256.0, "cutoff_frequency": 2.0}
        params.update(overrides)

        with pytest.raises(ConfigError):
            StageConfig(**params)

    def test_immutable(self) -> None:
        """Config cannot change after construction."""
        config = StageConfig(n_channels=2)
        with pytest.raises(FrozenInstanceError):
            config.n_channels = 3

    def test_errors_are_value_errors(self) -> None:
        """ConfigError is also a ValueError for generic handlers."""
        with pytest.raises(ValueError):
            StageConfig(n_channels=0)


# =============================================================================
# Shape Classification Tests
# =============================================================================


class TestUnitShape:
    """Tests for per-channel shape classification."""

    @pytest.mark.parametrize("channel", [1.0, 3, None, NAN, np.float64(2.0), np.array(1.0)])
    def test_samples(self, channel) -> None:
        assert unit_shape(channel) is UnitShape.SAMPLE

    @pytest.mark.parametrize("channel", [[1.0, 2.0], (1.0,), [], np.zeros(4)])
    def test_chunks(self, channel) -> None:
        assert unit_shape(channel) is UnitShape.CHUNK

    def test_rejects_2d_channel(self) -> None:
        with pytest.raises(RecordShapeError):
            unit_shape(np.zeros((2, 2)))


# =============================================================================
# Chunk Path Tests
# =============================================================================


class TestChunkRecords:
    """Tests for records carrying a block per channel."""

    def test_end_to_end_gaps_preserved(self) -> None:
        """Gaps stay at their positions; everything else is filtered."""
        stage = SafeHighpassFilter(n_channels=2, sampling_rate=256, cutoff_frequency=60)
        record = {"timestamp": 1000, "data": [[1, 2, NAN, 4], [5, NAN, 7, 8]]}

        out = stage.process(record)
        data = out["data"]

        assert len(data) == 2
        assert [len(ch) for ch in data] == [4, 4]
        assert np.isnan(data[0]).tolist() == [False, False, True, False]
        assert np.isnan(data[1]).tolist() == [False, True, False, False]

        # The filter saw the neighbour-mean fill values
        expected_0 = reference_filter([1, 2, 3, 4])
        expected_1 = reference_filter([5, 6, 7, 8])
        np.testing.assert_allclose(data[0][[0, 1, 3]], expected_0[[0, 1, 3]])
        np.testing.assert_allclose(data[1][[0, 2, 3]], expected_1[[0, 2, 3]])

    def test_none_markers(self) -> None:
        """None is treated like NaN in blocks and emitted as NaN."""
        stage = SafeHighpassFilter(n_channels=2, sampling_rate=256, cutoff_frequency=60)
        out = stage.process({"data": [[1, 2, None, 4], [5, None, 7, 8]]})

        assert np.isnan(out["data"][0][2])
        assert np.isnan(out["data"][1][1])

    def test_gap_free_block_matches_direct_filtering(self) -> None:
        """Repair is a no-op without gaps: same output and state as the bank alone."""
        config = StageConfig(n_channels=1, sampling_rate=256.0, cutoff_frequency=10.0)
        stage = SafeHighpassFilter(n_channels=1, sampling_rate=256.0, cutoff_frequency=10.0)
        bank = FilterBank.from_config(config)

        rng = np.random.default_rng(3)
        for _ in range(5):
            block = rng.normal(size=16)
            out = stage.process({"data": [block.tolist()]})
            direct = bank.step_many(0, block)

            np.testing.assert_allclose(out["data"][0], direct, rtol=1e-12, atol=1e-12)
        np.testing.assert_allclose(stage.bank.state(0), bank.state(0), rtol=1e-12, atol=1e-12)

    def test_block_gap_advances_state_with_fill(self) -> None:
        """In a block, a gap still advances the filter using the fill value."""
        stage = SafeHighpassFilter(n_channels=1, sampling_rate=256, cutoff_frequency=10)
        expected = SafeHighpassFilter(n_channels=1, sampling_rate=256, cutoff_frequency=10)

        stage.process({"data": [[1.0, NAN, 3.0]]})
        expected.bank.step_many(0, [1.0, 2.0, 3.0])

        np.testing.assert_allclose(stage.bank.state(0), expected.bank.state(0))

    def test_ndarray_data_round_trips_as_ndarray(self) -> None:
        """A 2D ndarray in gives a 2D ndarray out."""
        stage = SafeHighpassFilter(n_channels=3, sampling_rate=256, cutoff_frequency=2)
        data = np.arange(30, dtype=float).reshape(3, 10)
        data[1, 4] = np.nan

        out = stage.process({"data": data})

        assert isinstance(out["data"], np.ndarray)
        assert out["data"].shape == (3, 10)
        assert np.isnan(out["data"]).sum() == 1
        assert np.isnan(out["data"][1, 4])

    def test_consecutive_chunks_equal_one_long_block(self) -> None:
        """State carries across records: chunking does not change the output."""
        rng = np.random.default_rng(11)
        signal_in = rng.normal(50.0, 10.0, size=(2, 48))

        chunked = SafeHighpassFilter(n_channels=2, sampling_rate=256, cutoff_frequency=5)
        whole = SafeHighpassFilter(n_channels=2, sampling_rate=256, cutoff_frequency=5)

        pieces = [
            chunked.process({"data": signal_in[:, i:i + 12].tolist()})["data"]
            for i in range(0, 48, 12)
        ]
        joined = np.concatenate([np.asarray(p) for p in pieces], axis=1)
        full = np.asarray(whole.process({"data": signal_in.tolist()})["data"])

        np.testing.assert_allclose(joined, full, rtol=1e-12, atol=1e-12)


# =============================================================================
# Single-Sample Path Tests
# =============================================================================


class TestSampleRecords:
    """Tests for records carrying one sample per channel."""

    def test_filters_each_channel(self) -> None:
        """Each channel's first sample matches a fresh filter's first output."""
        stage = SafeHighpassFilter(n_channels=2, sampling_rate=256, cutoff_frequency=60)
        out = stage.process({"data": [1.0, 5.0]})

        np.testing.assert_allclose(out["data"][0], reference_filter([1.0])[0])
        np.testing.assert_allclose(out["data"][1], reference_filter([5.0])[0])

    def test_missing_sample_does_not_advance_state(self) -> None:
        """A gap in a single sample leaves that channel's state byte-for-byte unchanged."""
        stage = SafeHighpassFilter(n_channels=2, sampling_rate=256, cutoff_frequency=60)
        stage.process({"data": [1.0, 2.0]})
        before = stage.bank.state(0)

        out = stage.process({"data": [NAN, 3.0]})

        assert np.isnan(out["data"][0])
        assert stage.bank.state(0).tobytes() == before.tobytes()
        assert stage.samples_skipped == 1

    def test_none_sample_passes_through(self) -> None:
        """A None sample is emitted as None."""
        stage = SafeHighpassFilter(n_channels=2, sampling_rate=256, cutoff_frequency=60)
        out = stage.process({"data": [None, 3.0]})

        assert out["data"][0] is None
        assert isinstance(out["data"][1], float)

    def test_gap_rule_differs_between_samples_and_blocks(self) -> None:
        """Samples skip gaps; blocks consume them. Making these symmetric changes the output."""
        as_samples = SafeHighpassFilter(n_channels=1, sampling_rate=256, cutoff_frequency=10)
        as_block = SafeHighpassFilter(n_channels=1, sampling_rate=256, cutoff_frequency=10)
        skip_reference = SafeHighpassFilter(n_channels=1, sampling_rate=256, cutoff_frequency=10)

        for value in [1.0, NAN, 3.0]:
            as_samples.process({"data": [value]})
        as_block.process({"data": [[1.0, NAN, 3.0]]})
        skip_reference.bank.step_many(0, [1.0, 3.0])

        # Sample path advanced twice, block path three times
        np.testing.assert_allclose(as_samples.bank.state(0), skip_reference.bank.state(0))
        assert not np.allclose(as_samples.bank.state(0), as_block.bank.state(0))

    def test_sample_stream_matches_chunk_stream(self) -> None:
        """Without gaps, sample-by-sample and chunked processing agree."""
        rng = np.random.default_rng(5)
        signal_in = rng.normal(size=(3, 24))

        by_sample = SafeHighpassFilter(n_channels=3, sampling_rate=256, cutoff_frequency=20)
        by_chunk = SafeHighpassFilter(n_channels=3, sampling_rate=256, cutoff_frequency=20)

        sample_out = np.array(
            [by_sample.process({"data": signal_in[:, i].tolist()})["data"] for i in range(24)]
        ).T
        chunk_out = np.asarray(by_chunk.process({"data": signal_in.tolist()})["data"])

        np.testing.assert_allclose(sample_out, chunk_out, rtol=1e-12, atol=1e-12)


# =============================================================================
# Envelope and Contract Tests
# =============================================================================


class TestRecordEnvelope:
    """Tests for record reassembly and shape validation."""

    def test_passthrough_fields_unchanged(self) -> None:
        """Non-data fields are copied as-is and the input is not mutated."""
        stage = SafeHighpassFilter(n_channels=4, sampling_rate=256, cutoff_frequency=60)
        info = {"sampling_rate_hz": 256, "channel_names": ["TP9", "AF7", "AF8", "TP10"]}
        data = [[1.0, NAN], [2.0, 3.0], [4.0, 5.0], [NAN, 6.0]]
        record = {"timestamp": 1234.5, "info": info, "data": data}

        out = stage.process(record)

        assert out is not record
        assert set(out) == {"timestamp", "info", "data"}
        assert out["timestamp"] == 1234.5
        assert out["info"] is info
        assert len(out["data"]) == 4
        assert record["data"] is data
        assert np.isnan(record["data"][0][1])

    def test_channel_count_mismatch(self) -> None:
        """Wrong channel count is a ConfigError."""
        stage = SafeHighpassFilter(n_channels=4, sampling_rate=256, cutoff_frequency=60)

        with pytest.raises(RecordShapeError):
            stage.process({"data": [[1.0], [2.0]]})
        with pytest.raises(ConfigError):
            stage.process({"data": [1.0, 2.0, 3.0, 4.0, 5.0]})

    def test_missing_data_field(self) -> None:
        stage = SafeHighpassFilter(n_channels=1, sampling_rate=256, cutoff_frequency=60)
        with pytest.raises(RecordShapeError):
            stage.process({"timestamp": 0})

    def test_mixed_shapes_rejected_without_state_change(self) -> None:
        """A record mixing samples and blocks is rejected before any filtering."""
        stage = SafeHighpassFilter(n_channels=2, sampling_rate=256, cutoff_frequency=60)

        with pytest.raises(RecordShapeError):
            stage.process({"data": [[1.0, 2.0], 3.0]})
        with pytest.raises(RecordShapeError):
            stage.process({"data": [3.0, [1.0, 2.0]]})

        assert np.all(stage.bank.state(0) == 0.0)
        assert np.all(stage.bank.state(1) == 0.0)
        assert stage.records_processed == 0

    def test_non_numeric_sample_rejected_atomically(self) -> None:
        """Bad data in a later channel leaves earlier channels untouched."""
        stage = SafeHighpassFilter(n_channels=2, sampling_rate=256, cutoff_frequency=60)

        with pytest.raises(RecordShapeError):
            stage.process({"data": [[1.0, 2.0], [3.0, "x"]]})

        assert np.all(stage.bank.state(0) == 0.0)

    @pytest.mark.parametrize(
        "data",
        [
            [1.0, "nan"],
            [1.0, Decimal("NaN")],
            [[1.0, 2.0], [3.0, "nan"]],
            [[1.0, 2.0], [Decimal("NaN"), 4.0]],
        ],
    )
    def test_nan_like_values_never_reach_filters(self, data) -> None:
        """Values that only become NaN after conversion are rejected, not filtered."""
        stage = SafeHighpassFilter(n_channels=2, sampling_rate=256, cutoff_frequency=60)

        with pytest.raises(RecordShapeError):
            stage.process({"data": data})

        for channel in range(2):
            assert np.all(np.isfinite(stage.bank.state(channel)))
            assert np.all(stage.bank.state(channel) == 0.0)


# =============================================================================
# Stream Operator Tests
# =============================================================================


class TestStreamOperator:
    """Tests for applying the stage to an iterable of records."""

    def test_one_to_one_in_order(self) -> None:
        """Every record comes out once, in arrival order."""
        stage = safe_highpass_filter(n_channels=2, sampling_rate=256, cutoff_frequency=60)
        source = [{"timestamp": t, "data": [[float(t), 1.0], [2.0, NAN]]} for t in range(5)]

        out = list(stage(source))

        assert [r["timestamp"] for r in out] == [0, 1, 2, 3, 4]
        assert all(np.isnan(r["data"][1][1]) for r in out)
        assert stage.records_processed == 5
        assert stage.gaps_repaired == 5

    def test_lazy_pull(self) -> None:
        """Records are pulled from upstream one at a time."""
        pulled = []

        def source():
            for t in range(3):
                pulled.append(t)
                yield {"timestamp": t, "data": [1.0]}

        stage = SafeHighpassFilter(n_channels=1, sampling_rate=256, cutoff_frequency=60)
        stream = stage(source())
        assert pulled == []

        next(stream)
        assert pulled == [0]

    def test_custom_design_function(self) -> None:
        """A caller-supplied synthesis function is used for every channel."""
        calls = []

        def design(order, characteristic, cutoff, fs):
            calls.append(characteristic)
            return design_highpass_sos(order, characteristic, cutoff, fs)

        SafeHighpassFilter(n_channels=3, characteristic="bessel", design=design)

        assert calls == [FilterCharacteristic.BESSEL] * 3

    def test_reset_statistics(self) -> None:
        stage = SafeHighpassFilter(n_channels=1, sampling_rate=256, cutoff_frequency=60)
        stage.process({"data": [[1.0, NAN]]})
        stage.reset_statistics()

        assert stage.records_processed == 0
        assert stage.gaps_repaired == 0


# =============================================================================
# Config File Construction Tests
# =============================================================================


class TestFromConfig:
    """Tests for building the stage from YAML."""

    def test_reads_highpass_section(self, tmp_path) -> None:
        config_file = tmp_path / "stage.yaml"
        config_file.write_text(
            """
temporal:
  sampling_rate_hz: 512.0
highpass:
  order: 3
  characteristic: tschebyscheff1
  cutoff_frequency_hz: 1.0
stream:
  n_channels: 8
"""
        )

        stage = SafeHighpassFilter.from_config(config_path=config_file)

        assert stage.n_channels == 8
        assert stage.config.order == 3
        assert stage.config.sampling_rate == 512.0
        assert stage.config.cutoff_frequency == 1.0
        assert stage.config.characteristic is FilterCharacteristic.TSCHEBYSCHEFF1

    def test_argument_overrides_file(self, tmp_path) -> None:
        config_file = tmp_path / "stage.yaml"
        config_file.write_text("stream:\n  n_channels: 8\n")

        stage = SafeHighpassFilter.from_config(n_channels=2, config_path=config_file)

        assert stage.n_channels == 2

    def test_channel_count_required(self, tmp_path) -> None:
        """No channel count anywhere is a ConfigError."""
        config_file = tmp_path / "stage.yaml"
        config_file.write_text("highpass:\n  cutoff_frequency_hz: 2.0\n")

        with pytest.raises(ConfigError):
            SafeHighpassFilter.from_config(config_path=config_file)
