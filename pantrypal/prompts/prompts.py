"""Prompts sent to Gemini.

Two prompts:
- Ingredient detection (vision model): returns a JSON array of {name, confidence}.
- Recipe generation (text model): returns a JSON array of recipes in the shape
  parse_generated_recipes() expects.
"""

from typing import List, Optional

from pantrypal.models.models import DietaryPreferences

# Preference field -> wording used in the generation prompt
DIETARY_LABELS = {
    "vegetarian": "vegetarian",
    "vegan": "vegan",
    "gluten_free": "gluten-free",
    "keto": "keto",
}


def get_detection_prompt(max_ingredients: int) -> str:
    """Instructions for the vision model.

    Args:
        max_ingredients: Upper bound on returned ingredients (MAX_DETECTED_INGREDIENTS).
    """
    return f"""Analyze this image and identify all the food ingredients you can see.
Return a JSON array with the format:
[{{"name": "ingredient_name", "confidence": 0.95}}]

Rules:
- Only return actual food ingredients visible in the image
- Use common ingredient names (e.g., "tomatoes" not "cherry tomatoes")
- Confidence should be between 0.6 and 1.0 based on how clearly visible the ingredient is
- Return maximum {max_ingredients} ingredients
- Return only the JSON array, no other text"""


def get_generation_prompt(
    ingredients: List[str],
    preferences: Optional[DietaryPreferences] = None,
    max_cook_time: Optional[int] = None,
    recipe_count: int = 10,
) -> str:
    """Instructions for the recipe generation model.

    Requested dietary preferences and the cook-time limit become hard
    requirements in the prompt; the engine still scores the reply itself.
    """
    requirements = []
    if preferences is not None and preferences.requested():
        labels = [DIETARY_LABELS[name] for name in preferences.requested()]
        requirements.append(f"- Must be {' and '.join(labels)}")
    if max_cook_time:
        requirements.append(f"- Maximum cooking time: {max_cook_time} minutes")
    requirements.extend(
        [
            "- Use as many of the available ingredients as possible",
            "- Include common pantry staples if needed (salt, pepper, oil, etc.)",
            "- Provide clear step-by-step instructions",
            "- Include helpful cooking tips and creative variations",
            "- Rate each recipe realistically based on difficulty, taste, and popularity (1-5 scale)",
            "- Add nutritional estimates",
        ]
    )
    requirement_text = "\n".join(requirements)

    return f"""Create {recipe_count} amazing and diverse recipes using these available ingredients: {', '.join(ingredients)}

Requirements:
{requirement_text}

Return a JSON array with this exact format:
[
  {{
    "title": "Recipe Name",
    "description": "Brief appealing description of the dish",
    "instructions": ["Step 1", "Step 2", "Step 3", "Step 4"],
    "cookTime": 25,
    "servings": 4,
    "difficulty": "Easy",
    "rating": 4.5,
    "ingredients": [
      {{"name": "ingredient", "amount": "2", "unit": "cups"}}
    ],
    "tips": ["Helpful cooking tip 1", "Pro tip 2"],
    "variations": ["Variation idea 1", "Alternative approach 2"],
    "nutritionalInfo": {{"calories": 350, "protein": "15g", "carbs": "45g", "fat": "12g"}}
  }}
]

difficulty must be one of "Easy", "Medium", "Hard".
Make recipes diverse - include appetizers, mains, sides, and desserts when possible. Return only the JSON array, no other text."""
