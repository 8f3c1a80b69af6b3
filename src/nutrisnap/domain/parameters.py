"""Model parameters for the glycemic response engine.

Every constant the engine uses lives here. Defaults are the macro-aware
model's constants for the curve and the glycemic-index model's constants for
impact scoring, advice and swaps.
"""

from dataclasses import dataclass, field, replace

from nutrisnap.domain.glycemic import Advice, SwapOption

DEFAULT_GI_TABLE: tuple[tuple[str, int], ...] = (
    # Proteins
    ("egg", 0),
    ("eggs", 0),
    ("bacon", 0),
    ("sausage", 0),
    ("sausages", 0),
    ("tofu", 0),
    ("chicken", 0),
    ("beef", 0),
    ("pork", 0),
    ("fish", 0),
    ("seafood", 0),
    # Dairy
    ("milk", 30),
    ("cheese", 0),
    ("yogurt", 35),
    # Fruits
    ("apple", 35),
    ("banana", 55),
    ("orange", 45),
    ("berries", 30),
    ("strawberry", 30),
    ("blueberry", 25),
    # Vegetables
    ("broccoli", 10),
    ("spinach", 0),
    ("kale", 0),
    ("lettuce", 0),
    ("tomato", 15),
    ("carrot", 35),
    ("mushroom", 10),
    ("mushrooms", 10),
    # Grains
    ("white bread", 75),
    ("whole grain bread", 55),
    ("toast", 70),
    ("rice", 70),
    ("brown rice", 50),
    ("pasta", 55),
    ("oats", 55),
    ("cereal", 70),
    # Legumes
    ("beans", 30),
    ("lentils", 25),
    ("chickpeas", 35),
    # Snacks and sweets
    ("potato chips", 70),
    ("chocolate", 45),
    ("ice cream", 60),
    ("cake", 70),
    ("cookie", 70),
    ("cookies", 70),
    # Breakfast
    ("baked beans", 40),
    ("black pudding", 35),
    ("hash browns", 75),
)

_WHOLE_GRAIN = SwapOption(
    alternative="whole grain bread",
    reduction_percent=25,
    rationale="Higher fiber content slows glucose release",
)

DEFAULT_SWAP_TABLE: tuple[tuple[str, SwapOption], ...] = (
    ("white bread", _WHOLE_GRAIN),
    ("bread", _WHOLE_GRAIN),
    (
        "toast",
        SwapOption(
            alternative="sourdough toast",
            reduction_percent=30,
            rationale="Fermentation process reduces glucose impact",
        ),
    ),
    (
        "rice",
        SwapOption(
            alternative="brown rice",
            reduction_percent=30,
            rationale="Higher fiber content slows glucose release",
        ),
    ),
    (
        "white rice",
        SwapOption(
            alternative="brown rice or cauliflower rice",
            reduction_percent=35,
            rationale="Significantly lower carbohydrate content",
        ),
    ),
    (
        "potato",
        SwapOption(
            alternative="sweet potato",
            reduction_percent=15,
            rationale="Lower glycemic index",
        ),
    ),
    (
        "cereal",
        SwapOption(
            alternative="steel-cut oats",
            reduction_percent=40,
            rationale="Less processed with higher fiber content",
        ),
    ),
    (
        "pasta",
        SwapOption(
            alternative="whole wheat pasta or zucchini noodles",
            reduction_percent=30,
            rationale="Higher fiber or vegetable-based alternative",
        ),
    ),
)

GENERAL_ADVICE = Advice(
    kind="general",
    title="Eat slowly",
    description="Taking time to eat slowly can reduce glucose spikes by up to 15%",
)


@dataclass(frozen=True)
class ImpactModifier:
    """Multiplies an item's impact when one of its nutrients exceeds a threshold."""

    nutrient: str
    threshold_g: float
    factor: float


@dataclass(frozen=True)
class AdviceTier:
    """Advice unlocked when the meal impact exceeds a threshold."""

    min_impact: float
    advice: tuple[Advice, ...]


DEFAULT_IMPACT_MODIFIERS: tuple[ImpactModifier, ...] = (
    ImpactModifier(nutrient="fiber", threshold_g=5.0, factor=0.85),
    ImpactModifier(nutrient="fat", threshold_g=10.0, factor=0.80),
    ImpactModifier(nutrient="protein", threshold_g=15.0, factor=0.90),
)

DEFAULT_ADVICE_TIERS: tuple[AdviceTier, ...] = (
    AdviceTier(
        min_impact=15.0,
        advice=(
            Advice(
                kind="sequence",
                title="Eat vegetables first",
                description=(
                    "Consuming fiber-rich vegetables before the starchy components "
                    "of your meal reduces glucose spikes"
                ),
            ),
        ),
    ),
    AdviceTier(
        min_impact=20.0,
        advice=(
            Advice(
                kind="activity",
                title="Take a 15-minute walk",
                description=(
                    "Walking within 30 minutes after this meal can reduce glucose "
                    "spikes by up to 30%"
                ),
            ),
            Advice(
                kind="timing",
                title="Add vinegar",
                description=(
                    "Having 1-2 tablespoons of vinegar (like in a salad dressing) "
                    "before this meal can reduce glucose impact"
                ),
            ),
        ),
    ),
    AdviceTier(
        min_impact=25.0,
        advice=(
            Advice(
                kind="activity",
                title="Light resistance exercise",
                description=(
                    "5 minutes of light resistance exercise (squats, push-ups) "
                    "before eating can improve insulin sensitivity"
                ),
            ),
        ),
    ),
)


@dataclass(frozen=True)
class MacroCurveConstants:
    """Constants of the macro-aware glucose curve."""

    carb_factor: float = 3.5
    protein_factor: float = 0.6
    protein_slowing: float = 0.3
    fat_slowing: float = 0.5
    fiber_reduction: float = 0.8
    fiber_slowing: float = 0.4
    base_peak_minutes: float = 30.0
    peak_delay_per_slowing: float = 0.5
    max_peak_minutes: float = 60.0
    peak_reduction_per_slowing: float = 0.005
    max_peak_reduction: float = 0.5
    max_impact: float = 110.0
    base_decay_rate: float = 0.7
    decay_per_slowing: float = 0.003
    min_decay_rate: float = 0.3
    base_rise_shape: float = 1.5
    rise_shape_per_slowing: float = 0.01
    min_rise_shape: float = 1.0


@dataclass(frozen=True)
class ScalarCurveConstants:
    """Constants of the curve built from a pre-aggregated impact score."""

    peak_minutes: int = 45
    horizon_minutes: int = 180
    step_minutes: int = 15
    peak_multiplier: float = 1.5
    decay_rate: float = 0.02


@dataclass(frozen=True)
class ModelParameters:
    """Validated constants and lookup tables shared by the engine components."""

    baseline_glucose: int = 83
    default_gi: int = 50
    max_gi: int = 110
    gi_table: tuple[tuple[str, int], ...] = DEFAULT_GI_TABLE
    impact_modifiers: tuple[ImpactModifier, ...] = DEFAULT_IMPACT_MODIFIERS
    low_impact_max: float = 15.0
    medium_impact_max: float = 30.0
    macro_curve: MacroCurveConstants = field(default_factory=MacroCurveConstants)
    scalar_curve: ScalarCurveConstants = field(default_factory=ScalarCurveConstants)
    default_time_points: tuple[int, ...] = tuple(range(0, 181, 15))
    general_advice: Advice = GENERAL_ADVICE
    advice_tiers: tuple[AdviceTier, ...] = DEFAULT_ADVICE_TIERS
    swap_min_impact: float = 5.0
    swap_limit: int = 2
    swap_table: tuple[tuple[str, SwapOption], ...] = DEFAULT_SWAP_TABLE

    def __post_init__(self) -> None:
        if self.baseline_glucose <= 0:
            raise ValueError("baseline_glucose must be positive")
        if not 0 <= self.default_gi <= self.max_gi:
            raise ValueError("default_gi must be within 0..max_gi")
        for name, gi in self.gi_table:
            if not name or name != name.lower():
                raise ValueError(f"GI table keys must be lowercase: {name!r}")
            if not 0 <= gi <= self.max_gi:
                raise ValueError(f"GI for {name!r} is out of range: {gi}")
        for modifier in self.impact_modifiers:
            if modifier.nutrient not in {"fiber", "fat", "protein", "carbohydrates"}:
                raise ValueError(f"Unknown modifier nutrient: {modifier.nutrient}")
            if not 0 < modifier.factor <= 1:
                raise ValueError("Impact modifier factors must be within (0, 1]")
        if not 0 <= self.low_impact_max <= self.medium_impact_max:
            raise ValueError("Impact level thresholds must be ordered")
        if not self.default_time_points or self.default_time_points[0] != 0:
            raise ValueError("default_time_points must start at 0")
        if list(self.default_time_points) != sorted(set(self.default_time_points)):
            raise ValueError("default_time_points must be strictly increasing")
        scalar = self.scalar_curve
        if not 0 < scalar.peak_minutes <= scalar.horizon_minutes:
            raise ValueError("Scalar curve peak must fall within its horizon")
        if scalar.step_minutes <= 0:
            raise ValueError("Scalar curve step must be positive")
        if self.macro_curve.max_peak_minutes <= 0:
            raise ValueError("max_peak_minutes must be positive")
        for key, _option in self.swap_table:
            if not key or key != key.lower():
                raise ValueError(f"Swap table keys must be lowercase: {key!r}")
        if self.swap_limit < 0:
            raise ValueError("swap_limit must not be negative")

    def with_baseline(self, baseline_glucose: int) -> "ModelParameters":
        """Return a copy with a different baseline glucose."""
        return replace(self, baseline_glucose=baseline_glucose)
