"""Allocation resolver: roadmap type to strategic / customer-driven / maintenance split."""
from roadmapper.errors import ValidationError
from roadmapper.schemas.roadmap import ROADMAP_TYPES, AllocationStrategy

ALLOCATION_TOLERANCE = 0.01

ALLOCATION_PRESETS: dict[str, tuple[float, float, float]] = {
    "strategic-only": (70, 20, 10),
    "customer-only": (20, 70, 10),
    "balanced": (60, 30, 10),
}

DEFAULT_ALLOCATION = AllocationStrategy(strategic=60, customer_driven=30, maintenance=10)


def allocation_is_valid(allocation: AllocationStrategy) -> bool:
    """True when the three percentages total 100 within tolerance."""
    return abs(allocation.total() - 100) <= ALLOCATION_TOLERANCE


def validate_allocation(allocation: AllocationStrategy) -> AllocationStrategy:
    for label, value in (
        ("strategic", allocation.strategic),
        ("customerDriven", allocation.customer_driven),
        ("maintenance", allocation.maintenance),
    ):
        if not 0 <= value <= 100:
            raise ValidationError(f"Allocation {label} must be between 0 and 100, got {value:g}")
    if not allocation_is_valid(allocation):
        raise ValidationError(
            f"Allocation strategy must total 100%, got {allocation.total():g}%"
        )
    return allocation


def resolve_allocation(
    roadmap_type: str,
    custom_allocation: AllocationStrategy | None = None,
) -> AllocationStrategy:
    """Return the allocation for a roadmap type; custom types must supply a valid split."""
    if roadmap_type not in ROADMAP_TYPES:
        raise ValidationError(f"Unknown roadmap type: {roadmap_type}")
    if roadmap_type == "custom":
        if custom_allocation is None:
            raise ValidationError("customAllocation is required for custom roadmaps")
        return validate_allocation(custom_allocation.model_copy())
    strategic, customer_driven, maintenance = ALLOCATION_PRESETS[roadmap_type]
    return AllocationStrategy(
        strategic=strategic,
        customer_driven=customer_driven,
        maintenance=maintenance,
    )
