from enum import Enum
from textwrap import dedent


class HoodieColor(str, Enum):
    GREEN = "Green"
    BLACK = "Black"
    WHITE = "White"


def _color_word(color: HoodieColor) -> str:
    color = HoodieColor(color)
    # Every member needs a branch; new colors must be added here
    if color is HoodieColor.GREEN:
        return "green"
    if color is HoodieColor.BLACK:
        return "black"
    if color is HoodieColor.WHITE:
        return "white"
    raise ValueError(f"Unknown hoodie color: {color!r}")


ADJUSTMENT_MARKER = "Additional User Adjustments:"


def hoodie_description(color: HoodieColor) -> str:
    word = _color_word(color)
    return dedent(f"""\
        The person MUST be wearing the {word} hoodie shown in the second reference image.

        BRANDING & DESIGN RULES:
        1. **Chest Logo:** "SKODA" with "GCC" below it on the LEFT CHEST. Keep the text clear and legible.
        2. **Sleeve Graphic:** A minimalist electronic circuit line graphic located STRICTLY on the SLEEVE CUFF (wrist area).
           - CRITICAL: Do NOT place any graphics on the shoulder, upper arm, or main body. The shoulder must be clean solid color.
        3. **Color:** The hoodie must be {word}. Match the reference exactly.
        4. **Fit:** Professional, well-fitted office hoodie.
        """)


def build_prompt(color: HoodieColor, adjustment: str = "") -> str:
    """Compose the full edit instruction for one generation call.

    The text depends only on ``color`` and ``adjustment``; a blank adjustment
    leaves no trace in the output.
    """
    base = dedent("""\
        Create a professional corporate MEDIUM SHOT (waist-up) portrait.

        INSTRUCTIONS:
        1. **Subject:** Use the face from the first image. Preserve facial features, expression, and identity exactly.
        2. **Attire:** The person must be wearing the hoodie from the second reference image.
        3. **Framing:** WAIST-UP / MEDIUM SHOT.
           - It is CRITICAL to show the shoulders, chest, and upper arms to display the hoodie logo and pockets.
           - Do NOT crop tightly around the face. Zoom out to show the body.
        4. **Background:** Professional, bright office environment or clean studio gradient (LinkedIn style).
        5. **Lighting:** Soft, professional studio lighting.
        """)
    prompt = (
        base
        + "\n"
        + hoodie_description(color)
        + "\nHigh quality, photorealistic, 4k resolution, professional photography."
    )
    if adjustment:
        prompt += f"\n{ADJUSTMENT_MARKER} {adjustment}"
    return prompt
