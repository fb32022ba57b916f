from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

ATTRIBUTE_SCHEMA = """{
    "productName": "specific product name",
    "category": "product category",
    "features": ["feature1", "feature2", "feature3", "feature4", "feature5"],
    "targetAudience": "primary target audience",
    "suggestedTone": "professional/casual/playful/luxury",
    "colors": ["primary colors visible"],
    "materials": ["visible materials if applicable"],
    "brandName": "brand if visible",
    "productType": "specific type",
    "keySellingPoints": ["unique selling point 1", "unique selling point 2"],
    "suggestedDescription": "A compelling 2-3 sentence product description",
    "estimatedPrice": "price range estimate",
    "style": "modern/classic/minimalist/etc"
}"""

IMAGE_ANALYSIS_PROMPT = f"""Analyze this product image and provide detailed information in JSON format:
{ATTRIBUTE_SCHEMA}

Be specific and detailed. If you can't determine something, use "Not visible" or provide your best educated guess based on the product type."""

# Gemini tends to wrap JSON in markdown unless told otherwise.
GEMINI_IMAGE_ANALYSIS_PROMPT = IMAGE_ANALYSIS_PROMPT + "\nReturn ONLY valid JSON, no markdown or additional text."


def description_prompts(
    name: str,
    category: Optional[str] = None,
    audience: Optional[str] = None,
    features: Optional[str] = None,
    tone: Optional[str] = None,
) -> List[str]:
    return [
        (
            f"Write a compelling product description for {name}. Category: {category or 'general'}. "
            f"Target audience: {audience or 'general consumers'}. Key features: {features or 'high quality'}. "
            f"Tone: {tone or 'professional'}. Keep it under 150 words."
        ),
        (
            f"Create an SEO-optimized product description for {name} that highlights its benefits. "
            f"Focus on {features or 'quality and value'}. Target: {audience or 'online shoppers'}."
        ),
        (
            f"Write a persuasive product description for {name} that converts browsers into buyers. "
            f"Emphasize {features or 'unique selling points'}."
        ),
    ]


def fallback_description(name: str, category: Optional[str] = None, audience: Optional[str] = None) -> str:
    return (
        f"Premium {name} - High quality {category or 'product'} designed for "
        f"{audience or 'discerning customers'}."
    )


def bulk_description_prompt(product: Dict[str, Any]) -> str:
    tone = product.get("tone") or "professional"
    return f"""Generate a compelling product description for an e-commerce listing.

Product Name: {product.get("product_name") or "Unknown Product"}
Category: {product.get("category") or "General"}
Features: {product.get("features") or "High quality product"}
Target Audience: {product.get("target_audience") or "General consumers"}
Tone: {tone}

Create a product description that:
1. Starts with an engaging hook
2. Highlights the key features and benefits
3. Addresses the target audience's needs
4. Uses a {tone} tone
5. Includes a call to action
6. Is between 100-150 words

Format the response as plain text without any markdown or special formatting."""


def dalle_prompt(name: str, features: Optional[str] = None) -> str:
    return f"Product photography of {name}: {features or 'professional, high-quality, commercial style'}"


def _optional_line(label: str, value: Optional[str]) -> str:
    return f"{label}: {value}" if value else ""


def studio_shot_prompts(
    name: str,
    features: Optional[str] = None,
    category: Optional[str] = None,
    audience: Optional[str] = None,
) -> List[Tuple[str, str]]:
    """Hero, lifestyle and detail prompts for service-account Imagen calls."""
    setting = "living space" if category == "home" else "environment"
    hero = f"""A photorealistic product photograph of {name}.
{_optional_line("Product features", features)}
{_optional_line("Category", category)}

Technical specifications:
- Shot type: Hero product shot, 3/4 angle view
- Lighting: Professional studio lighting with soft box diffusion, key light at 45 degrees
- Background: Pure white seamless backdrop (#FFFFFF) for e-commerce
- Camera settings: Shot with Canon 5D Mark IV, 100mm macro lens, f/8, ISO 100
- Style: Commercial product photography, ultra-high resolution, tack sharp focus
- Post-processing: Color-corrected, dust removed, subtle shadow for depth
- Mood: Premium, trustworthy, appealing to {audience or 'online shoppers'}
- Composition: Rule of thirds, product occupies 70% of frame
- Format: Square 1:1 aspect ratio, 1024x1024 pixels

The image should showcase premium quality, highlighting textures, materials, and craftsmanship."""

    lifestyle = f"""Generate a photorealistic lifestyle product image of {name} in an elegant setting.
{_optional_line("Product category", category)}

Scene details:
- Setting: Modern, minimalist {setting} with natural elements
- Lighting: Golden hour natural light through large windows, creating warm ambiance
- Props: Complementary items that suggest the product's use case and value
- Camera: Wide angle 35mm lens, f/4, shallow depth of field with product in sharp focus
- Style: Premium lifestyle photography, magazine quality
- Color palette: Warm, inviting tones with the product as the focal point
- Target audience: {audience or 'aspirational consumers'}
- Composition: Environmental shot showing product in context of use

The image should tell a story about how the product enhances the customer's lifestyle."""

    detail = f"""Create a photorealistic close-up detail shot of {name}.
{_optional_line("Highlighting features", features)}

Macro photography specifications:
- Shot type: Extreme close-up showing texture and quality
- Lighting: Directional lighting to emphasize texture and materials
- Focus: Selective focus on key product detail with beautiful bokeh
- Camera: Macro lens at 1:1 magnification, f/5.6, focus stacking for sharpness
- Style: Premium product detail photography
- Emphasis: Material quality, craftsmanship, unique features
- Background: Soft gradient or completely blurred

The image should communicate premium quality through attention to detail."""

    return [("hero", hero), ("lifestyle", lifestyle), ("detail", detail)]


def quick_shot_prompts(
    name: str,
    features: Optional[str] = None,
    category: Optional[str] = None,
    audience: Optional[str] = None,
) -> List[Tuple[str, str]]:
    """Shorter hero and lifestyle prompts used with Application Default Credentials."""
    hero = f"""A photorealistic product photograph of {name}.
{_optional_line("Product features", features)}
{_optional_line("Category", category)}

Technical specifications:
- Shot type: Hero product shot, 3/4 angle view
- Lighting: Professional studio lighting with soft box diffusion
- Background: Pure white seamless backdrop for e-commerce
- Camera: Shot with professional DSLR, 100mm macro lens, f/8
- Style: Commercial product photography, ultra-high resolution
- Target audience: {audience or 'online shoppers'}
- Format: Square 1:1 aspect ratio

The image should showcase premium quality and craftsmanship."""

    lifestyle = f"""Generate a photorealistic lifestyle product image of {name} in an elegant setting.
{_optional_line("Product category", category)}

Scene details:
- Setting: Modern, minimalist environment
- Lighting: Natural golden hour light
- Style: Premium lifestyle photography
- Target audience: {audience or 'aspirational consumers'}

The image should tell a story about the product's value."""

    return [("hero", hero), ("lifestyle", lifestyle)]


def video_script(name: str, description: str, features: Optional[str] = None) -> str:
    features_line = f" Key features include: {features}" if features else ""
    return (
        f"Hey everyone! Let me tell you about the amazing {name}. {description}"
        f"{features_line} This is definitely worth checking out!"
    )
