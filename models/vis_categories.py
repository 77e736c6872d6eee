"""Static VIS category catalogs and curated inspiration prompts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from models.session_models import AspectRatio


@dataclass(frozen=True)
class VisCategory:
    """One catalog entry: display name, prompt fragment and output ratio."""

    name: str
    prompt_suffix: str
    aspect_ratio: AspectRatio = AspectRatio.SQUARE


_SQ = AspectRatio.SQUARE
_WIDE = AspectRatio.WIDESCREEN
_TALL = AspectRatio.PORTRAIT
_P34 = AspectRatio.PORTRAIT_3_4
_L43 = AspectRatio.LANDSCAPE_4_3


BASIC_VI_CATEGORIES: List[VisCategory] = [
    # Logo standards and layouts
    VisCategory("Technical Grid", "technical logo grid construction, blueprint style, geometric analysis, construction lines, fibonacci spiral, engineering drawing, black and white", _SQ),
    VisCategory("Clear Space Guide", 'logo safe zone diagram, exclusion area defined by "x" height, minimal technical guide, dimension lines, spacing rules', _SQ),
    VisCategory("Horizontal Lockup", "logo horizontal layout standard, text beside icon, clean presentation on white, official corporate usage", _WIDE),
    VisCategory("Vertical Lockup", "logo vertical layout standard, icon above text, centered alignment, modern swiss typography", _P34),
    VisCategory("Square Container", "logo centered in a square container, balanced white space, social media profile picture style", _SQ),
    VisCategory("Logo Symbol Only", "isolated brand mark symbol, large scale, favicon style, abstract icon focus, no text", _SQ),
    VisCategory("Wordmark Isolation", "logotype text isolated, typography focus, letterform analysis, no symbol, clean presentation", _WIDE),
    VisCategory("Small Scale Test", "logo scalability test sheet, shown at 16px 32px 64px, legibility check, minimalist grid", _L43),
    VisCategory("Mono Ink Version", "solid black logo on white paper, 100% black, high contrast stamp effect, professional print standard", _SQ),
    VisCategory("Reverse Negative", "solid white logo on deep black background, reverse contrast, dark mode aesthetic, high impact", _SQ),
    # Color systems
    VisCategory("Primary Palette", "brand primary color palette, large swatches, pantone codes, cmyk rgb values, minimalist layout, luxury feel", _L43),
    VisCategory("Secondary Palette", "complementary secondary color palette, accent colors, harmonic color scheme, modern design swatches", _L43),
    VisCategory("Semantic Colors", "functional color system for UI, success green, error red, warning amber, info blue, cohesive with brand", _WIDE),
    VisCategory("Gradient System", "brand color gradient mesh, smooth transition, modern blur, mesh gradient background, vibrant", _WIDE),
    VisCategory("Color Weighting", "visual weight infographic, 60-30-10 color rule diagram, brand color application guide", _SQ),
    # Typography specimens
    VisCategory("Primary Typeface", 'primary brand font family specimen poster, "Aa" large glyph, full alphabet set, style matching the uploaded logo aesthetic', _P34),
    VisCategory("Secondary Typeface", "secondary typeface specimen, body copy text block, legible serif or sans, matching the brand personality", _P34),
    VisCategory("Type Pairing", "typography pairing guide, primary headline with secondary body text, hierarchy example, clean layout", _L43),
    VisCategory("Typography Grid", "baseline grid diagram, vertical rhythm in typography, technical spacing guide, modern layout", _P34),
    VisCategory("Letterform Detail", "macro shot of a single character from the logo font, ink bleed or digital precision, font character analysis", _SQ),
    # Graphic assets
    VisCategory("Geometric Pattern", "seamless brand pattern, repeating geometric shapes derived from logo DNA, wallpaper texture, wrapping paper", _SQ),
    VisCategory("Abstract Supergraphic", "large scale abstract supergraphics, cropped logo elements, dynamic background composition, wall art", _WIDE),
    VisCategory("Fluid Brand Shapes", "organic abstract shapes for brand background, fluid design, cohesive color palette", _WIDE),
    VisCategory("Iconography Set", "custom 12-icon UI set, consistent line weight, minimalist vector style, cohesive brand language", _L43),
    VisCategory("Brand Illustration", "corporate illustration style guide, flat vector art, abstract conceptual scene, brand colors", _L43),
    # Digital and material standards
    VisCategory("Digital UI Kit", "modern UI design system, buttons, input fields, cards, brand colors applied, figma-style preview", _WIDE),
    VisCategory("App Icon System", "app icon design guidelines, ios and android rounded square container, logo adaptation", _SQ),
    VisCategory("Material Texture", "logo embossed on premium textured paper, macro shot, tactile feel, luxury branding", _SQ),
    VisCategory("Metal Fabrication", "3D laser-cut metal logo signage, brushed steel texture, industrial architectural style", _WIDE),
    VisCategory("Glass Etching", "logo etched on frosted glass, office divider context, soft lighting, professional", _L43),
]

VIS_CATEGORIES: List[VisCategory] = [
    # Corporate
    VisCategory("Business Card", "high quality professional business card mockup, minimalist modern design, front and back", _WIDE),
    VisCategory("Letterhead", "clean corporate letterhead and envelope mockup on a desk, elegant paper texture", _P34),
    VisCategory("ID Badge", "corporate id badge lanyard mockup, professional look, hanging", _P34),
    VisCategory("Notebook", "hardcover notebook mockup with logo embossed, black leather texture", _P34),
    VisCategory("Presentation Slide", "powerpoint presentation slide deck mockup, clean layout, branded master slide", _WIDE),
    # Digital
    VisCategory("Mobile App", "modern iphone mockups showing a login screen with logo, clean ui, clay render", _TALL),
    VisCategory("Landing Page", "macbook pro laptop mockup, displaying a clean corporate landing page with logo", _WIDE),
    VisCategory("Social Media Feed", "instagram grid layout mockup, cohesive brand aesthetic, phone screen", _SQ),
    # Merchandise
    VisCategory("T-Shirt", "black cotton t-shirt mockup with logo on chest, realistic fabric, fashion shoot", _P34),
    VisCategory("Tote Bag", "canvas tote bag mockup, eco-friendly vibe, screen printed logo", _P34),
    VisCategory("Coffee Cup", "disposable paper coffee cup mockup, cafe setting, steam", _SQ),
    VisCategory("Packaging Box", "minimalist shipping box mockup, packaging tape with logo pattern", _L43),
    # Signage
    VisCategory("Office Sign", "3D outdoor office signage mockup, modern glass building, day time", _L43),
    VisCategory("Billboard", "large outdoor billboard mockup, city street context, high impact", _WIDE),
    VisCategory("Vehicle Wrap", "delivery van wrap mockup, side view, clean branding, white van", _WIDE),
    VisCategory("Storefront", "boutique storefront signage, backlit, evening lighting, glowing logo", _L43),
]

RANDOM_PROMPTS: List[str] = [
    "A futuristic hologram projected from a smartwatch",
    "A massive neon billboard in a rainy cyberpunk city",
    "Minimalist concrete wall etching in a modern art gallery",
    "Gold foil stamping on premium matte black packaging",
    "A branded hot air balloon floating over the Swiss Alps",
    "Embroidery on a high-end silk bomber jacket",
    "A laser-cut metal business card resting on moss",
    "A branded formula 1 racing car speeding on track",
    "An underwater hotel room window decal",
    "A coffee art pattern on a latte in a cozy cafe",
    "A giant inflatable mascot floating in a parade",
    "A branded spacesuit helmet reflection",
]

# Ratios drawn per call when rendering a "surprise me" action.
RANDOM_ASPECT_RATIOS: List[AspectRatio] = [AspectRatio.SQUARE, AspectRatio.WIDESCREEN, AspectRatio.PORTRAIT]
