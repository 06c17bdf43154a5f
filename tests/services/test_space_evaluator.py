import pytest

from backup_space.config import settings
from backup_space.schemas import ProbeFailure
from backup_space.services.space_evaluator import evaluate

GB = 1_000_000_000


@pytest.mark.unit
class TestSpaceEvaluator:
    def test_plenty_of_space(self, capacity_factory):
        """Test a destination with half its space free and a small backup."""
        capacity = capacity_factory(total=1000 * GB, free=500 * GB)

        verdict = evaluate(capacity, 10 * GB)

        assert verdict.sufficient is True
        assert verdict.total_required_bytes == 10 * GB + settings.safety_buffer_bytes
        assert verdict.percent_free_after_copy == pytest.approx(49.0)
        assert verdict.low_free_after_copy is False
        assert verdict.warning_message is None
        assert verdict.error_message is None
        assert verdict.blocks_copy is False

    def test_insufficient_space(self, capacity_factory):
        """Test that a backup larger than available space is blocked."""
        capacity = capacity_factory(total=1000 * GB, free=500 * GB)

        verdict = evaluate(capacity, 990 * GB)

        assert verdict.sufficient is False
        assert verdict.blocks_copy is True
        assert verdict.warning_message is None
        assert verdict.error_message == "Insufficient space: Need 990.1 GB but only 500 GB available"

    def test_low_free_after_copy_warning(self, capacity_factory):
        """Test a warning when less than 10% would remain free."""
        capacity = capacity_factory(total=100 * GB, free=15 * GB)

        verdict = evaluate(capacity, 6 * GB)

        assert verdict.sufficient is True
        assert verdict.percent_free_after_copy == pytest.approx(9.0)
        assert verdict.low_free_after_copy is True
        assert verdict.error_message is None
        assert verdict.warning_message == (
            "Low disk space warning: After backup, only 9.0% will remain free"
        )
        assert verdict.blocks_copy is False

    def test_error_takes_priority_over_warning(self, capacity_factory):
        """Test that an insufficient destination gets an error and no warning."""
        capacity = capacity_factory(total=100 * GB, free=5 * GB)

        verdict = evaluate(capacity, 6 * GB)

        assert verdict.low_free_after_copy is True
        assert verdict.error_message is not None
        assert verdict.warning_message is None

    def test_probe_failure(self):
        """Test that an unknown capacity is treated as dangerous."""
        verdict = evaluate(ProbeFailure(path="/Volumes/Gone"), 1024)

        assert verdict.destination == "/Volumes/Gone"
        assert verdict.sufficient is False
        assert verdict.low_free_after_copy is True
        assert verdict.error_message == "Unable to determine available disk space"
        assert verdict.warning_message is None
        assert verdict.blocks_copy is True
        assert verdict.capacity.total_bytes == 0
        assert verdict.capacity.percent_free == 0

    def test_exact_fit_is_sufficient(self, capacity_factory):
        """Test the boundary where available equals required plus buffer."""
        capacity = capacity_factory(total=1000 * GB, available=GB + 5_000, free=900 * GB)

        assert evaluate(capacity, GB, buffer=5_000).sufficient is True
        assert evaluate(capacity, GB + 1, buffer=5_000).sufficient is False

    @pytest.mark.parametrize("available", [0, 1, 99_999_999, 100_000_000, 10 * GB, 10 * GB + 1])
    @pytest.mark.parametrize("required", [0, 1, 5 * GB, 10 * GB])
    def test_sufficiency_boundary(self, capacity_factory, available, required):
        """Test that sufficiency matches available >= required + buffer."""
        capacity = capacity_factory(total=1000 * GB, free=1000 * GB, available=available)

        verdict = evaluate(capacity, required)

        expected = available >= required + settings.safety_buffer_bytes
        assert verdict.sufficient is expected
        if not expected:
            assert verdict.error_message is not None

    def test_available_used_for_sufficiency_free_for_percentage(self, capacity_factory):
        """Test that reserved blocks count toward free percentage but not sufficiency."""
        capacity = capacity_factory(total=100 * GB, free=50 * GB, available=GB)

        verdict = evaluate(capacity, 2 * GB)

        assert verdict.sufficient is False
        assert verdict.percent_free_after_copy == pytest.approx(48.0)

    def test_negative_space_after_copy_not_clamped(self, capacity_factory):
        """Test that a projected overdraft yields a negative percentage."""
        capacity = capacity_factory(total=100 * GB, free=10 * GB)

        verdict = evaluate(capacity, 20 * GB)

        assert verdict.percent_free_after_copy == pytest.approx(-10.0)

    def test_custom_threshold(self, capacity_factory):
        """Test a threshold override."""
        capacity = capacity_factory(total=100 * GB, free=30 * GB)

        assert evaluate(capacity, 5 * GB).warning_message is None
        verdict = evaluate(capacity, 5 * GB, low_free_threshold=30.0)
        assert verdict.warning_message == (
            "Low disk space warning: After backup, only 25.0% will remain free"
        )

    def test_threshold_from_settings(self, capacity_factory, monkeypatch):
        """Test that the default threshold comes from settings."""
        monkeypatch.setattr(settings, "low_free_threshold_percent", 50.0)

        verdict = evaluate(capacity_factory(total=100 * GB, free=45 * GB), GB)

        assert verdict.low_free_after_copy is True
        assert verdict.warning_message is not None

    def test_evaluate_is_pure(self, capacity_factory):
        """Test that identical inputs produce identical verdicts."""
        capacity = capacity_factory(total=100 * GB, free=15 * GB)

        first = evaluate(capacity, 6 * GB, buffer=123)
        second = evaluate(capacity, 6 * GB, buffer=123)

        assert first == second
        assert first.model_dump_json() == second.model_dump_json()

    def test_rejects_negative_inputs(self, capacity_factory):
        """Test that negative byte counts are caller errors."""
        capacity = capacity_factory()
        with pytest.raises(ValueError, match="required_bytes"):
            evaluate(capacity, -1)
        with pytest.raises(ValueError, match="buffer"):
            evaluate(capacity, 1, buffer=-1)

    def test_buffer_from_settings(self, capacity_factory, monkeypatch):
        """Test that the default safety buffer comes from settings."""
        monkeypatch.setattr(settings, "safety_buffer_bytes", 5 * GB)
        capacity = capacity_factory(total=100 * GB, free=50 * GB, available=8 * GB)

        verdict = evaluate(capacity, 4 * GB)

        assert verdict.buffer_bytes == 5 * GB
        assert verdict.total_required_bytes == 9 * GB
        assert verdict.sufficient is False
        assert evaluate(capacity, 4 * GB, buffer=0).sufficient is True
