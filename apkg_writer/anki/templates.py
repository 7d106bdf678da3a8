"""
Basic front/back note model and field formatting.

Used by the command line to turn tab-separated rows into genanki notes.
"""

import html
import logging
import os
from typing import Dict, Optional
import genanki


logger = logging.getLogger(__name__)


# Media types rendered as images; everything else is played as sound
IMAGE_EXTENSIONS = {'.png', '.jpg', '.jpeg', '.gif', '.svg', '.webp', '.bmp'}


class BasicCardTemplate:
    """
    Anki note model with a front, a back and an optional media field.

    Creates cards with:
    - Front: question text
    - Back: answer text followed by the media field
    """

    # Fixed so re-imported packages update the same note type
    MODEL_ID = 1559383000
    MODEL_NAME = 'apkg-writer Basic'

    CSS = """
.card {
    font-family: "Helvetica Neue", Helvetica, Arial, sans-serif;
    font-size: 20px;
    text-align: center;
    color: black;
    background-color: white;
}

.media img {
    max-width: 100%;
}
"""

    FRONT_TEMPLATE = """
<div class="front">{{Front}}</div>
"""

    BACK_TEMPLATE = """
{{FrontSide}}

<hr id="answer">

<div class="back">{{Back}}</div>
<div class="media">{{Media}}</div>
"""

    @classmethod
    def create_model(cls) -> genanki.Model:
        """
        Create the basic note model.

        Returns:
            genanki.Model: Configured Anki model
        """
        model = genanki.Model(
            model_id=cls.MODEL_ID,
            name=cls.MODEL_NAME,
            fields=[
                {'name': 'Front'},
                {'name': 'Back'},
                {'name': 'Media'},
            ],
            templates=[
                {
                    'name': 'Card 1',
                    'qfmt': cls.FRONT_TEMPLATE,
                    'afmt': cls.BACK_TEMPLATE,
                },
            ],
            css=cls.CSS,
        )

        logger.debug(f"Created model with ID {cls.MODEL_ID}")
        return model


class CardFormatter:
    """
    Formats note text and media references into field values.
    """

    @staticmethod
    def format_media_field(media_name: Optional[str]) -> str:
        """
        Build the markup that embeds a media file in a field.

        Args:
            media_name: Base name of the media file, as stored in the manifest

        Returns:
            ``<img src="...">`` for images, ``[sound:...]`` otherwise, or an
            empty string when there is no media
        """
        if not media_name:
            return ''

        extension = os.path.splitext(media_name)[1].lower()
        if extension in IMAGE_EXTENSIONS:
            return f'<img src="{html.escape(media_name, quote=True)}">'
        return f'[sound:{media_name}]'

    @staticmethod
    def format_note_fields(front: str, back: str,
                           media_name: Optional[str] = None) -> Dict[str, str]:
        """
        Format note text into escaped field values.

        Args:
            front: Question text
            back: Answer text
            media_name: Optional media base name for the Media field

        Returns:
            Dictionary with Front, Back and Media values
        """
        fields = {
            'Front': html.escape(front.strip(), quote=False),
            'Back': html.escape(back.strip(), quote=False),
            'Media': CardFormatter.format_media_field(media_name),
        }

        logger.debug(f"Formatted note: {front} → {back}")
        return fields
