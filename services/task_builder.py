"""Build generation task lists from the static VIS catalogs."""

from __future__ import annotations

from typing import Iterable, List, Optional

from models.session_models import GenerationTask
from models.vis_categories import BASIC_VI_CATEGORIES, VIS_CATEGORIES, VisCategory
from services.openai.prompts import application_prompt, basic_element_prompt

BASIC_PHASE_LABEL = "BASIC SYSTEM"
APPLICATION_PHASE_LABEL = "MOCKUP"


def build_basic_tasks(categories: Optional[Iterable[VisCategory]] = None) -> List[GenerationTask]:
    """One standard-variation task per basic system category."""
    source = BASIC_VI_CATEGORIES if categories is None else categories
    return [
        GenerationTask(
            category_name=category.name,
            prompt=basic_element_prompt(category.prompt_suffix),
            variation_label="Standard",
            aspect_ratio=category.aspect_ratio,
        )
        for category in source
    ]


def build_application_tasks(categories: Optional[Iterable[VisCategory]] = None) -> List[GenerationTask]:
    """One mockup task per application scenario category."""
    source = VIS_CATEGORIES if categories is None else categories
    return [
        GenerationTask(
            category_name=category.name,
            prompt=application_prompt(category.prompt_suffix),
            variation_label="Application",
            aspect_ratio=category.aspect_ratio,
        )
        for category in source
    ]
