"""Food database domain models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FoodSummary:
    """Summary information about a food from FatSecret."""

    food_id: str
    name: str
    food_type: str | None
    brand_name: str | None
    description: str | None


@dataclass(frozen=True)
class ServingNutrition:
    """Macros for one serving of a food."""

    calories: float
    protein_g: float
    fat_g: float
    carbs_g: float
    fiber_g: float
    serving_description: str


@dataclass(frozen=True)
class FoodDetails:
    """Full food details with the first serving's macros."""

    summary: FoodSummary
    serving: ServingNutrition

    def as_meal_food(self, quantity: float = 1.0) -> dict[str, object]:
        """Return the food in the shape the glucose engine accepts."""
        return {
            "name": self.summary.name,
            "quantity": quantity,
            "macros": {
                "carbohydrates": self.serving.carbs_g,
                "protein": self.serving.protein_g,
                "fat": self.serving.fat_g,
            },
            "micros": {"fiber": self.serving.fiber_g},
        }
