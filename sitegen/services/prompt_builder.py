# sitegen/services/prompt_builder.py
# System instructions and user turns for the page-generation model

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional, Sequence

from sitegen.middleware.error_handler import ValidationError


class PromptMode(str, Enum):
    GENERATE = "generate"
    EDIT = "edit"


SMOOTH_SCROLL_SCRIPT = """<script>
        document.querySelectorAll('a[href^="#"]').forEach(anchor => {
            anchor.addEventListener('click', function (e) {
                e.preventDefault();
                const targetId = this.getAttribute('href');
                const targetElement = document.querySelector(targetId);
                if (targetElement) {
                    targetElement.scrollIntoView({ behavior: 'smooth' });
                }
            });
        });
    </script>"""

BASE_INSTRUCTIONS = f"""You are a leading AI web designer and developer who builds beautiful, modern one-page websites for small businesses (UMKM) in Indonesia using HTML and TailwindCSS.

Main rules:
1.  **IMAGES:** This is the most important rule. If the user provides image URLs, you **MUST** use those URLs. **NEVER** use placeholder image URLs (such as placehold.co or unsplash) when relevant URLs have been provided.
2.  **MODERN DESIGN:** Make the design professional, not rigid. Use an attractive layout, soft shadows, rounded corners and, where it fits, subtle color gradients.
3.  **TYPOGRAPHY:** Always import and use a good Google Font such as 'Poppins' or 'Inter' inside the <head> tag.
4.  **INTERACTIVITY:** Add transitions to buttons and links on hover. Where possible, add subtle animations as elements scroll into view.
5.  **CLEAN CODE:** The result must be one complete HTML file (including <!DOCTYPE html>, <html>, <head> and <body>).
6.  **FUNCTIONALITY:** You **MUST** include the following <script> block right before the closing </body> tag so in-page navigation scrolls smoothly.
    {SMOOTH_SCROLL_SCRIPT}
7.  **FINAL OUTPUT:** The final answer is **ONLY** the HTML code block. Do NOT add any explanation or commentary outside the HTML code block."""

EDIT_PREFIX = (
    "You are an expert AI web developer. Your task is to modify the existing HTML code "
    "according to the user's request. Follow all of the main rules below:"
)

NO_IMAGES = "None"


def build_system_prompt(mode: PromptMode) -> str:
    if mode is PromptMode.EDIT:
        return f"{EDIT_PREFIX}\n\n{BASE_INSTRUCTIONS}"
    return BASE_INSTRUCTIONS


def _format_images(image_urls: Optional[Sequence[str]]) -> str:
    urls = [u for u in (image_urls or []) if u]
    return ", ".join(urls) if urls else NO_IMAGES


def build_user_turn(
    mode: PromptMode,
    user_text: str,
    image_urls: Optional[Sequence[str]] = None,
    current_html: Optional[str] = None,
) -> Dict[str, Any]:
    """Build the single user message sent alongside the system prompt.

    EDIT mode embeds current_html verbatim and requires it.
    """
    images = _format_images(image_urls)
    if mode is PromptMode.EDIT:
        if not current_html:
            raise ValidationError("Current HTML is required to edit a site")
        text = (
            f'EDIT REQUEST: "{user_text}"\n\n'
            f"Available image URLs: {images}\n\n"
            f"CURRENT HTML CODE TO EDIT:\n```html\n{current_html}\n```"
        )
    else:
        text = f'Business description: "{user_text}".\n\nImage URLs: {images}'

    return {"role": "user", "content": [{"type": "text", "text": text}]}
