"""
Product video generation.

Order of attempts: D-ID talking avatar stored on Cloudinary, then a Cloudinary
still-image or text video, then a demo payload carrying the script.
"""
from __future__ import annotations

import logging
import re
import time
from typing import Any, Dict, List, Optional

from app.config import Settings, get_settings
from app.integrations.cloudinary import CloudinaryClient, build_url, extract_public_id, slugify, text_overlay
from app.integrations.did import DIDClient
from app.prompts.product_prompts import video_script

logger = logging.getLogger(__name__)

DEFAULT_AVATAR = "amy-Aq6OmGZpMt"
DEFAULT_VOICE = "en-US-JennyNeural"
DEMO_VIDEO_URL = "https://res.cloudinary.com/demo/video/upload/w_1280,h_720,c_fill/sea_turtle.mp4"
SIMPLE_VIDEO_TRANSFORMATION = "w_1280,h_720,c_fill,q_auto,f_auto"
FRAME = "c_fill,h_720,w_1280"


def _timestamp_ms() -> int:
    return int(time.time() * 1000)


def _overlay_id(image_url: str) -> str:
    return re.sub(r"\.[^.]+$", "", re.sub(r"^.*/", "", image_url))


class VideoGenerator:
    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    async def generate(
        self,
        product_name: str,
        product_description: str,
        features: Optional[str] = None,
        images: Optional[List[str]] = None,
        avatar: str = DEFAULT_AVATAR,
        voice: str = DEFAULT_VOICE,
        product_showcase: bool = False,
    ) -> Dict[str, Any]:
        images = images or []
        script = video_script(product_name, product_description, features)
        logger.info(
            "Video generation config: cloudinary=%s did_key=%s did_key_length=%d",
            self.settings.cloudinary_configured,
            bool(self.settings.did_key),
            len(self.settings.did_key or ""),
        )

        if self.settings.did_key_usable:
            try:
                return await self._avatar_video(product_name, script, images, avatar, voice, product_showcase)
            except Exception as exc:
                logger.error("D-ID video generation failed, falling back: %s", exc)
        else:
            logger.info("D-ID API key not configured or invalid")

        if self.settings.cloudinary_configured:
            try:
                return await self._cloudinary_video(product_name, product_description, images)
            except Exception as exc:
                logger.error("Cloudinary video generation error: %s", exc)

        return {
            "success": True,
            "message": "Video generation requires D-ID API key and/or product images",
            "demoMode": True,
            "productName": product_name,
            "script": script,
            "videoUrl": None,
            "note": "Add a D-ID API key to the environment for full video generation",
        }

    async def _avatar_video(
        self,
        product_name: str,
        script: str,
        images: List[str],
        avatar: str,
        voice: str,
        product_showcase: bool,
    ) -> Dict[str, Any]:
        did = DIDClient(self.settings.did_key)
        result_url = await did.create_video(script, avatar, voice)
        video_bytes = await did.download(result_url)

        cloudinary = CloudinaryClient()
        uploaded = await cloudinary.upload(
            video_bytes,
            resource_type="video",
            folder="product-videos",
            public_id=f"{slugify(product_name)}_{_timestamp_ms()}",
            format="mp4",
        )
        video_url = uploaded["secure_url"]

        if product_showcase and images:
            showcase_url = cloudinary.url(
                uploaded["public_id"],
                resource_type="video",
                transformations=[
                    FRAME,
                    f"c_fill,g_east,h_400,l_{_overlay_id(images[0])},w_400,x_50",
                    "f_auto,q_auto",
                ],
            )
            return {
                "success": True,
                "videoUrl": showcase_url,
                "originalVideoUrl": video_url,
                "productName": product_name,
                "message": "Product showcase video created successfully",
                "cloudinaryVideo": True,
            }

        return {
            "success": True,
            "videoUrl": video_url,
            "productName": product_name,
            "message": "Video generated and stored in Cloudinary",
            "cloudinaryVideo": True,
        }

    async def _cloudinary_video(
        self, product_name: str, product_description: str, images: List[str]
    ) -> Dict[str, Any]:
        cloudinary = CloudinaryClient()
        first_image = images[0] if images else None

        if first_image and first_image.startswith("http"):
            uploaded = await cloudinary.upload(
                first_image,
                resource_type="image",
                folder="product-videos",
                public_id=f"{slugify(product_name)}_{_timestamp_ms()}",
            )
            video_url = cloudinary.url(
                uploaded["public_id"],
                resource_type="video",
                transformations=[
                    FRAME,
                    "du_5",
                    text_overlay(product_name, font_size=80, font_weight="bold", background="#000000AA", y=-200),
                    text_overlay(product_description[:100] + "...", font_size=40, width=1000, y=100),
                ],
                fmt="mp4",
            )
            return {
                "success": True,
                "videoUrl": video_url,
                "productName": product_name,
                "message": "Product video created using Cloudinary",
                "cloudinaryMode": True,
            }

        text_video_url = cloudinary.url(
            "sample",
            resource_type="video",
            transformations=[
                "b_black,du_5,h_720,w_1280",
                text_overlay(product_name, font_size=100, font_weight="bold", y=-100),
                text_overlay("AI Generated Video", font_size=60, color="#667eea", y=50),
            ],
            fmt="mp4",
        )
        return {
            "success": True,
            "videoUrl": text_video_url,
            "productName": product_name,
            "message": "Text video created using Cloudinary",
            "textMode": True,
        }

    async def generate_simple(
        self, product_name: str, images: Optional[List[str]] = None
    ) -> Dict[str, Any]:
        images = images or []
        cloud_name = self.settings.cloudinary_cloud_name
        if images:
            first_image = images[0]
            public_id = extract_public_id(first_image)
            if public_id and cloud_name:
                return {
                    "success": True,
                    "videoUrl": build_url(cloud_name, public_id, "video", [SIMPLE_VIDEO_TRANSFORMATION], "mp4"),
                    "productName": product_name,
                    "message": "Video created from product image",
                    "mode": "image_to_video",
                }
            try:
                uploaded = await CloudinaryClient().upload(
                    first_image,
                    resource_type="image",
                    folder="product-videos",
                    public_id=f"product_{_timestamp_ms()}",
                )
                return {
                    "success": True,
                    "videoUrl": build_url(
                        cloud_name, uploaded["public_id"], "video", [SIMPLE_VIDEO_TRANSFORMATION], "mp4"
                    ),
                    "productName": product_name,
                    "message": "Video created from uploaded image",
                    "mode": "uploaded_image_to_video",
                }
            except Exception as exc:
                logger.error("Image to video error: %s", exc)

        logger.info("Using demo video fallback")
        return {
            "success": True,
            "videoUrl": DEMO_VIDEO_URL,
            "productName": product_name,
            "message": "Demo video (Cloudinary/D-ID configuration needed for custom videos)",
            "mode": "demo",
            "note": "This is a demo video. Configure your APIs for custom product videos.",
        }
