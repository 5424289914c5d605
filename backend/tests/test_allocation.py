"""Tests for the allocation resolver."""
import pytest

from roadmapper.engine.allocation import (
    ALLOCATION_PRESETS,
    allocation_is_valid,
    resolve_allocation,
    validate_allocation,
)
from roadmapper.errors import ValidationError
from roadmapper.schemas.roadmap import AllocationStrategy


class TestPresets:
    @pytest.mark.parametrize("roadmap_type", sorted(ALLOCATION_PRESETS))
    def test_preset_sums_to_100(self, roadmap_type):
        allocation = resolve_allocation(roadmap_type)
        assert allocation.total() == 100

    def test_balanced_values(self):
        allocation = resolve_allocation("balanced")
        assert (allocation.strategic, allocation.customer_driven, allocation.maintenance) == (60, 30, 10)

    def test_preset_ignores_custom_allocation(self):
        custom = AllocationStrategy(strategic=10, customer_driven=10, maintenance=80)
        allocation = resolve_allocation("customer-only", custom)
        assert (allocation.strategic, allocation.customer_driven, allocation.maintenance) == (20, 70, 10)

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            resolve_allocation("everything")


class TestCustomAllocation:
    def test_valid_custom_returned(self):
        custom = AllocationStrategy(strategic=50, customer_driven=25, maintenance=25)
        allocation = resolve_allocation("custom", custom)
        assert allocation == custom
        assert allocation is not custom

    @pytest.mark.parametrize(
        "values",
        [(40, 40, 19), (50, 50, 1), (0, 0, 0), (33.3, 33.3, 33.3)],
    )
    def test_custom_not_summing_to_100_rejected(self, values):
        strategic, customer_driven, maintenance = values
        custom = AllocationStrategy(strategic=strategic, customer_driven=customer_driven, maintenance=maintenance)
        with pytest.raises(ValidationError, match="must total 100%"):
            resolve_allocation("custom", custom)

    def test_within_tolerance_accepted(self):
        custom = AllocationStrategy(strategic=33.33, customer_driven=33.33, maintenance=33.34)
        assert allocation_is_valid(custom)
        assert resolve_allocation("custom", custom).total() == pytest.approx(100)

    def test_custom_without_allocation_rejected(self):
        with pytest.raises(ValidationError, match="customAllocation"):
            resolve_allocation("custom")

    def test_out_of_range_value_rejected(self):
        # model_construct skips field validation, as a caller bypassing the request schema would
        allocation = AllocationStrategy.model_construct(strategic=120, customer_driven=-10, maintenance=-10)
        with pytest.raises(ValidationError, match="between 0 and 100"):
            validate_allocation(allocation)
