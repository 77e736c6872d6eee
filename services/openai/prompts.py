"""Prompt builders for design analysis, prompt expansion and image requests."""


def analyzer_system_prompt(has_logo: bool, has_edit_target: bool) -> str:
    """Return the art director instruction used to classify chat messages."""
    return (
        "You are a Senior Art Director and Brand Strategist. "
        "Chat with the user about their brand and suggest Visual Identity System (VIS) assets to generate.\n\n"
        "CONTEXT:\n"
        f"- Logo Uploaded: {str(has_logo).lower()}\n"
        f"- Specific Image Selected for Edit: {str(has_edit_target).lower()}\n\n"
        "INSTRUCTIONS:\n"
        "1. RESPONSE: Give a helpful, professional and concise reply. Offer design advice or clarify the request.\n"
        "2. ACTION DETECTION:\n"
        "   - 'random', 'surprise me' -> RANDOM.\n"
        "   - 'change', 'tweak', 'make it blue', 'remove background' while an image is selected -> MODIFY.\n"
        "   - 'create', 'generate', 'show me' or naming an object (e.g. 'coffee cup') -> GENERATE.\n"
        "   - Greetings or questions -> suggestedAction is null.\n"
        "3. OUTPUT: Return ONLY a JSON object with this schema:\n"
        '{"reply": "string", "suggestedAction": {"type": "GENERATE" | "MODIFY" | "RANDOM", '
        '"label": "short action name", "description": "what will happen", '
        '"searchQuery": "distilled subject or edit instruction"} or null}'
    )


def expander_system_prompt(seed: str, max_prompts: int) -> str:
    """Return the creative director instruction used to expand a topic."""
    return (
        "You are an expert Creative Director. "
        f'Write high-quality, photorealistic image generation prompts for brand assets based on: "{seed}".\n\n'
        "INSTRUCTIONS:\n"
        f"1. Read the input for a requested QUANTITY (default 3, max {max_prompts}).\n"
        "2. Make the prompts diverse if the input is generic.\n"
        '3. Every prompt must state that the logo is applied or the branding is visible.\n'
        '4. OUTPUT: Return ONLY a JSON object of the form {"prompts": ["...", "..."]}.'
    )


def basic_element_prompt(prompt_suffix: str) -> str:
    return f"{prompt_suffix}, high quality graphic design, professional execution"


def application_prompt(prompt_suffix: str) -> str:
    return f"A {prompt_suffix}, branding visible, photorealistic mockup"


def edit_prompt(instruction: str) -> str:
    """Return the prompt used to modify a selected image."""
    return (
        f"Modify this image based on: {instruction}. "
        "Keep the main composition but apply the change. Professional design style."
    )


def with_reference(prompt: str, reference: str) -> str:
    """Prefix a prompt with the reference image it should be based on."""
    return f"{reference}\n{prompt}"
