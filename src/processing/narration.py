from typing import List, Optional

from core.entities import RankedItem, SpeechFile
from services.converters import markdown_to_html
from services.speech import SpeechOptions, html_to_speech_file


def generate_speech_files(
    ranked_items: List[RankedItem],
    options: Optional[SpeechOptions] = None,
) -> List[SpeechFile]:
    """
    Convert each markdown summary to HTML, then to a speech file, in order.
    """
    return [
        html_to_speech_file(
            markdown_to_html(item.summary, backslash_escapes_html_tags=True),
            options,
        )
        for item in ranked_items
    ]
