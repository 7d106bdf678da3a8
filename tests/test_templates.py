"""
Tests for the basic note model and field formatting.
"""

from apkg_writer.anki.templates import BasicCardTemplate, CardFormatter


class TestBasicCardTemplate:
    """Test the note model."""

    def test_model(self):
        model = BasicCardTemplate.create_model()

        assert model.model_id == BasicCardTemplate.MODEL_ID
        assert model.name == BasicCardTemplate.MODEL_NAME
        assert [field['name'] for field in model.fields] == ['Front', 'Back', 'Media']
        assert len(model.templates) == 1


class TestCardFormatter:
    """Test field formatting."""

    def test_sound_markup(self):
        assert CardFormatter.format_media_field("hello.mp3") == "[sound:hello.mp3]"

    def test_image_markup(self):
        assert CardFormatter.format_media_field("Map.PNG") == '<img src="Map.PNG">'

    def test_image_name_escaped(self):
        assert CardFormatter.format_media_field('a"b.jpg') == '<img src="a&quot;b.jpg">'

    def test_no_media(self):
        assert CardFormatter.format_media_field(None) == ''
        assert CardFormatter.format_media_field('') == ''

    def test_note_fields(self):
        fields = CardFormatter.format_note_fields("  1 < 2  ", "true & false", "img.png")
        assert fields == {
            'Front': '1 &lt; 2',
            'Back': 'true &amp; false',
            'Media': '<img src="img.png">',
        }
