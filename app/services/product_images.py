"""
Product photography through Vertex AI Imagen, persisted on Cloudinary.
"""
from __future__ import annotations

import logging
import re
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from app.config import Settings, get_settings
from app.integrations.cloudinary import CloudinaryClient
from app.integrations.vertex import VertexAuthError, VertexImagenClient
from app.prompts.product_prompts import studio_shot_prompts

logger = logging.getLogger(__name__)

IMAGE_TRANSFORMATION = "c_limit,h_1024,w_1024/q_auto:best/f_auto"

PromptBuilder = Callable[..., List[Tuple[str, str]]]


class ProductImageService:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        use_service_account: bool = True,
        model_label: str = "Vertex AI Imagen",
    ):
        self.settings = settings or get_settings()
        self.imagen = VertexImagenClient(use_service_account=use_service_account)
        self.model_label = model_label

    async def generate(
        self,
        product_name: str,
        features: Optional[str] = None,
        category: Optional[str] = None,
        audience: Optional[str] = None,
        prompt_builder: PromptBuilder = studio_shot_prompts,
    ) -> List[Dict[str, Any]]:
        """Generate every shot independently; failed shots are logged and skipped.

        Credential failures are not per-shot problems and are raised.
        """
        images: List[Dict[str, Any]] = []
        for shot, prompt in prompt_builder(product_name, features, category, audience):
            logger.info("Generating %s shot for %s", shot, product_name)
            try:
                image_data = await self.imagen.generate_image(prompt)
            except VertexAuthError:
                raise
            except Exception as exc:
                logger.error("Failed to generate %s image: %s", shot, exc)
                continue

            url = await self._store(f"data:image/png;base64,{image_data}", product_name, shot, category)
            images.append(
                {
                    "url": url,
                    "type": shot,
                    "style": f"{shot.capitalize()} Shot",
                    "model": self.model_label,
                    "prompt": prompt[:200] + "...",
                }
            )
        return images

    async def _store(self, data_url: str, product_name: str, shot: str, category: Optional[str]) -> str:
        if not self.settings.cloudinary_configured:
            return data_url
        public_id = f"{re.sub(r'[^a-zA-Z0-9]', '_', product_name)}_{shot}_{int(time.time() * 1000)}"
        try:
            result = await CloudinaryClient().upload(
                data_url,
                resource_type="image",
                folder="product-images",
                public_id=public_id,
                tags=[tag for tag in ("product", shot, category) if tag],
                transformation=IMAGE_TRANSFORMATION,
            )
        except Exception as exc:
            logger.error("Failed to upload %s image to Cloudinary: %s", shot, exc)
            return data_url
        return result.get("secure_url") or data_url


def oauth_image_service(settings: Optional[Settings] = None) -> ProductImageService:
    return ProductImageService(settings, use_service_account=False, model_label="Vertex AI Imagen (OAuth)")
